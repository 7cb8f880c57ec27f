"""
Password-protected posts: payload codec and HTML rendering.
"""
