"""
Catalog API — Services Layer
============================

What:  Business rules between the routes (HTTP) and the database.

Service Inventory:
    - validation:        declarative field rules, one ordered error list per request
    - upload_service:    buffers the product image and publishes it to the ImageStore
    - image_store:       ImageStore interface plus the Cloudinary implementation
    - notification:      NotificationSink interface plus the HTTP mail implementation
    - repository:        generic persistence gateway over one ORM model
    - product_service:   create / list / get / update / delete products
    - category_service:  create / list / get / update / delete categories

The image store and notification sink are reached through FastAPI
dependencies (get_image_store, get_notification_sink) so tests swap in fakes.
"""
