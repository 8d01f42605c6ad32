# -*- coding: utf-8 -*-
"""
API роутер категорий товаров.

Эндпоинты:
- GET / - Дерево категорий (плоским списком)
- POST / - Создание категории
- PUT /{category_id} - Переименование и перенос категории
- DELETE /{category_id} - Удаление пустой категории
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from store_admin.auth.dependencies import require_admin_session
from store_admin.auth.tokens import SessionClaims
from store_admin.database import get_db_session
from store_admin.db import Category, Product
from store_admin.models.category import (
    CategoryCreate,
    CategoryParent,
    CategoryResponse,
    CategoryUpdate,
)

router = APIRouter()
logger = logging.getLogger("store_admin.routers.categories")

# Ограничение глубины обхода при поиске циклов
MAX_TREE_DEPTH = 100


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _category_rows():
    """SELECT категорий с именем родителя и счётчиками товаров и подкатегорий."""
    parent = aliased(Category)
    children_alias = aliased(Category)

    products_count = (
        select(func.count(Product.id))
        .where(Product.category_id == Category.id)
        .correlate(Category)
        .scalar_subquery()
    )
    children_count = (
        select(func.count(children_alias.id))
        .where(children_alias.parent_id == Category.id)
        .correlate(Category)
        .scalar_subquery()
    )

    return (
        select(Category, parent.name, products_count, children_count)
        .outerjoin(parent, parent.id == Category.parent_id)
    )


async def _load_category(db: AsyncSession, category_id: str) -> CategoryResponse:
    result = await db.execute(_category_rows().where(Category.id == category_id))
    return _to_response(*result.one())


def _to_response(
    category: Category,
    parent_name: Optional[str],
    products_count: int,
    children_count: int,
) -> CategoryResponse:
    return CategoryResponse(
        id=category.id.strip(),
        name=category.name,
        description=category.description,
        imageUrl=category.image_url,
        parentId=category.parent_id.strip() if category.parent_id else None,
        parent=(
            CategoryParent(id=category.parent_id.strip(), name=parent_name)
            if category.parent_id and parent_name is not None
            else None
        ),
        productsCount=products_count or 0,
        childrenCount=children_count or 0,
    )


async def _creates_cycle(db: AsyncSession, category_id: str, new_parent_id: str) -> bool:
    """
    Проверяет, не является ли новый родитель потомком категории.

    Поднимаемся от нового родителя к корню; встретили саму категорию, значит цикл.
    """
    current_id: Optional[str] = new_parent_id
    for _ in range(MAX_TREE_DEPTH):
        if current_id is None:
            return False
        if current_id == category_id:
            return True
        result = await db.execute(select(Category.parent_id).where(Category.id == current_id))
        current_id = result.scalar_one_or_none()
    return True


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    session: SessionClaims = Depends(require_admin_session),
    db: AsyncSession = Depends(get_db_session),
):
    """Все категории: сначала корневые, затем по названию."""
    result = await db.execute(
        _category_rows()
        .order_by(Category.parent_id.is_not(None), Category.parent_id, Category.name)
    )
    return [_to_response(*row) for row in result.all()]


@router.post("", response_model=CategoryResponse)
async def create_category(
    data: CategoryCreate,
    session: SessionClaims = Depends(require_admin_session),
    db: AsyncSession = Depends(get_db_session),
):
    """Создание категории."""
    name = _clean(data.name)
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Название категории обязательно",
        )

    parent_id = _clean(data.parentId)
    if parent_id and await db.get(Category, parent_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Родительская категория не найдена",
        )

    category = Category(
        name=name,
        description=_clean(data.description),
        image_url=_clean(data.imageUrl),
        parent_id=parent_id,
    )
    db.add(category)
    await db.commit()

    logger.info(f"Создана категория '{name}' ({category.id}), автор: {session.login}")
    return await _load_category(db, category.id)


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    session: SessionClaims = Depends(require_admin_session),
    db: AsyncSession = Depends(get_db_session),
):
    """Переименование категории и смена родителя."""
    name = _clean(data.name)
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Название категории обязательно",
        )

    category = await db.get(Category, category_id)
    if category is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Категория не найдена",
        )

    parent_id = _clean(data.parentId)
    if parent_id == category_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Категория не может быть родителем самой себе",
        )

    if parent_id:
        if await db.get(Category, parent_id) is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Родительская категория не найдена",
            )
        if await _creates_cycle(db, category_id, parent_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Нельзя создать циклическую зависимость",
            )

    category.name = name
    category.parent_id = parent_id
    await db.commit()

    logger.info(f"Обновлена категория {category_id}, автор: {session.login}")
    return await _load_category(db, category_id)


@router.delete("/{category_id}")
async def delete_category(
    category_id: str,
    session: SessionClaims = Depends(require_admin_session),
    db: AsyncSession = Depends(get_db_session),
):
    """Удаление категории без товаров и подкатегорий."""
    category = await db.get(Category, category_id)
    if category is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Категория не найдена",
        )

    products_result = await db.execute(
        select(func.count(Product.id)).where(Product.category_id == category_id)
    )
    if products_result.scalar() or 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Нельзя удалить категорию с товарами",
        )

    children_result = await db.execute(
        select(func.count(Category.id)).where(Category.parent_id == category_id)
    )
    if children_result.scalar() or 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Нельзя удалить категорию с подкатегориями",
        )

    await db.delete(category)
    await db.commit()

    logger.info(f"Удалена категория {category_id}, автор: {session.login}")
    return {"success": True}
