# -*- coding: utf-8 -*-
"""
Pydantic схемы категорий товаров.
"""

from typing import Optional

from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    name: Optional[str] = Field(None, max_length=255, description="Название")
    description: Optional[str] = Field(None, description="Описание")
    parentId: Optional[str] = Field(None, description="ID родительской категории")
    imageUrl: Optional[str] = Field(None, max_length=1024, description="URL изображения")


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255, description="Название")
    parentId: Optional[str] = Field(None, description="ID родительской категории")


class CategoryParent(BaseModel):
    id: str
    name: str


class CategoryResponse(BaseModel):
    """Категория со счётчиками товаров и подкатегорий."""
    id: str
    name: str
    description: Optional[str] = None
    imageUrl: Optional[str] = None
    parentId: Optional[str] = None
    parent: Optional[CategoryParent] = None
    productsCount: int = 0
    childrenCount: int = 0
