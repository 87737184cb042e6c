"""Users app package.

Defines the tenant (``Organization``) and the custom user model that
carries an organization membership and a role. Use
``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout
the project.
"""
