# Routes package init
"""
Blog Posts API: Routes Package
===============================

Route Inventory:
    - blog_posts.py:  GET    /blog-posts        (list)
                      GET    /blog-posts/{id}   (detail)
                      POST   /blog-posts        (create)
                      PUT    /blog-posts/{id}   (partial update)
                      DELETE /blog-posts/{id}   (delete)
    - pages.py:       GET    /                  (static landing page)
    - health.py:      GET    /health            (service health check)

Routes stay thin: read the request, call the service, shape the response.
"""
