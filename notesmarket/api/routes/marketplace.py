"""
Marketplace API: listings, purchase, purchase/sales history.
Static paths (/notes/my-listings, /notes/search) are declared before /notes/{listing_id}.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from notesmarket.api.deps import get_current_user_id
from notesmarket.db.session import get_db
from notesmarket.schemas.marketplace import (
    ListingIn,
    ListingView,
    PaymentAddressOut,
    PurchaseHistoryView,
    PurchaseIn,
    PurchaseResult,
)
from notesmarket.services.marketplace.service import MarketplaceService


router = APIRouter(prefix="/marketplace", tags=["marketplace"])


@router.post("/notes", response_model=ListingView, status_code=status.HTTP_201_CREATED)
def create_listing(
    body: ListingIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ListingView:
    return MarketplaceService(db).create_listing(body, user_id)


@router.get("/notes", response_model=list[ListingView])
def list_active(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[ListingView]:
    return MarketplaceService(db).list_active(user_id)


@router.get("/notes/my-listings", response_model=list[ListingView])
def my_listings(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[ListingView]:
    return MarketplaceService(db).my_listings(user_id)


@router.get("/notes/search", response_model=list[ListingView])
def search(
    query: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[ListingView]:
    return MarketplaceService(db).search(query, user_id)


@router.get("/notes/{listing_id}", response_model=ListingView)
def get_listing(
    listing_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ListingView:
    return MarketplaceService(db).get_listing(listing_id, user_id)


@router.get("/notes/{listing_id}/payment-address", response_model=PaymentAddressOut)
def payment_address(
    listing_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> PaymentAddressOut:
    return MarketplaceService(db).payment_address(listing_id, user_id)


@router.put("/notes/{listing_id}", response_model=ListingView)
def update_listing(
    listing_id: str,
    body: ListingIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ListingView:
    return MarketplaceService(db).update_listing(listing_id, body, user_id)


@router.delete("/notes/{listing_id}")
def delete_listing(
    listing_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> dict:
    MarketplaceService(db).delete_listing(listing_id, user_id)
    return {"message": "Marketplace note deleted successfully"}


@router.post("/purchase", response_model=PurchaseResult)
def purchase(
    body: PurchaseIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> PurchaseResult:
    return MarketplaceService(db).purchase(body, user_id)


@router.get("/purchases/my-purchases", response_model=list[ListingView])
def my_purchases(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[ListingView]:
    return MarketplaceService(db).my_purchases(user_id)


@router.get("/purchases/history", response_model=list[PurchaseHistoryView])
def purchase_history(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[PurchaseHistoryView]:
    return MarketplaceService(db).buyer_history(user_id)


@router.get("/sales/history", response_model=list[PurchaseHistoryView])
def sales_history(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[PurchaseHistoryView]:
    return MarketplaceService(db).seller_history(user_id)
