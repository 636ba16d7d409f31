"""
Kernel layer: identity, section registry, permissions, audit log and models.

Engines (articles, comments, notifications, digest, mail) build on these and
never bypass the permission core.
"""
