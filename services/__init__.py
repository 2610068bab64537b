"""
services/ - Business Logic Layer
================================
Orchestrates calls across repositories: writes in the right order,
deletes parents after their attachments, and composes read models
(projects with previews, educations with projects) for the HTTP layer.
"""
