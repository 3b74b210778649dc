"""
                        Services Module

Business logic on top of two external collaborators, each with a Mock
(development) and a Real (production) implementation.

Services:
    - store: document store (in-memory / Cloud Firestore)
    - images: image hosting (mock / Cloudinary)
    - orders: order aggregation and status transitions
    - catalog: cuisines, categories and products
    - dashboard: admin overview statistics
"""
