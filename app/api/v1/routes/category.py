from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.dependencies import get_id_generator
from app.schemas.project import CategoryCreate, CategoryUpdate, CategoryOut, PaymentMethodCreate, PaymentMethodOut
from app.services.category_services import (
    create_category,
    update_category,
    delete_category,
    create_payment_method,
    delete_payment_method,
)
from app.services.project_services import get_project_or_404, list_categories, list_payment_methods

router = APIRouter()


@router.get("/projects/{project_id}/categories", response_model=list[CategoryOut])
async def project_categories(project_id: str, db: AsyncSession = Depends(get_db)):
    await get_project_or_404(db, project_id)
    return await list_categories(db, project_id)


@router.post("/projects/{project_id}/categories", response_model=CategoryOut, status_code=201)
async def add_category(
    project_id: str,
    data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    new_id = Depends(get_id_generator),
):
    return await create_category(db, project_id, data, new_id=new_id)


@router.patch("/categories/{category_id}", response_model=CategoryOut)
async def edit_category(category_id: str, data: CategoryUpdate, db: AsyncSession = Depends(get_db)):
    return await update_category(db, category_id, data)


@router.delete("/categories/{category_id}")
async def del_category(category_id: str, db: AsyncSession = Depends(get_db)):
    return await delete_category(db, category_id)


@router.get("/projects/{project_id}/payment-methods", response_model=list[PaymentMethodOut])
async def project_payment_methods(project_id: str, db: AsyncSession = Depends(get_db)):
    await get_project_or_404(db, project_id)
    return await list_payment_methods(db, project_id)


@router.post("/projects/{project_id}/payment-methods", response_model=PaymentMethodOut, status_code=201)
async def add_payment_method(
    project_id: str,
    data: PaymentMethodCreate,
    db: AsyncSession = Depends(get_db),
    new_id = Depends(get_id_generator),
):
    return await create_payment_method(db, project_id, data, new_id=new_id)


@router.delete("/payment-methods/{payment_method_id}")
async def del_payment_method(payment_method_id: str, db: AsyncSession = Depends(get_db)):
    return await delete_payment_method(db, payment_method_id)
