"""Main API router"""

from fastapi import APIRouter

from .routes import auth, users, products, search, cart, orders, admin, mpesa, contact

# Main API router
api_router = APIRouter()

api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(users.router, prefix="/profile", tags=["profile"])
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(search.router, prefix="/search", tags=["products"])
api_router.include_router(cart.router, prefix="/cart", tags=["cart"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(mpesa.router, prefix="/mpesa", tags=["payments"])
api_router.include_router(contact.router, prefix="/contact", tags=["contact"])
