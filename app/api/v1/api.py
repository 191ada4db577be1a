from fastapi import APIRouter
from app.api.v1.endpoints import auth, hotels, partners, clients, transactions, reports

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(hotels.router, prefix="/hotels", tags=["hotels"])
api_router.include_router(partners.router, prefix="/hotels/{hotel_id}/partners", tags=["partners"])
api_router.include_router(clients.router, prefix="/hotels/{hotel_id}/clients", tags=["clients"])
api_router.include_router(transactions.router, prefix="/hotels/{hotel_id}/transactions", tags=["transactions"])
api_router.include_router(reports.router, prefix="/hotels/{hotel_id}/reports", tags=["reports"])
