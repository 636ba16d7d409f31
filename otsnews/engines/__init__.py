"""
Engines - the article, comment, notification, digest and mail services.
"""
