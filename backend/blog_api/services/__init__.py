# Services package init
"""
Blog Posts API: Services Layer
===============================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Services receive the request's AsyncSession, run the store operations
       and return response models or raise application exceptions.

Service Inventory:
    - BlogPostService: list, get, create, update and delete blog posts
"""
