"""
NH Console - Suppliers & Categories

Both lists are addressed by name. A category belongs to one supplier:
renaming a supplier rewrites its categories, removing a supplier removes
its categories first.
"""

import logging
from typing import Dict, List, Optional

from services.document_store import (
    add_document,
    update_document,
    delete_document,
    find_documents,
    find_one_document,
)

logger = logging.getLogger("catalog")


async def list_suppliers() -> List[Dict]:
    return await find_documents("suppliers", sort=[("name", 1)])


async def add_supplier(name: str) -> Optional[Dict]:
    """Returns None if a supplier with that name already exists"""
    name = name.strip()
    if await find_one_document("suppliers", {"name": name}):
        return None
    supplier_id = await add_document("suppliers", {"name": name})
    logger.info(f"[SUPPLIER_ADDED] name={name}")
    return {"id": supplier_id, "name": name}


async def rename_supplier(old_name: str, new_name: str) -> bool:
    supplier = await find_one_document("suppliers", {"name": old_name})
    if not supplier:
        return False

    new_name = new_name.strip()
    if new_name == old_name:
        return True

    await update_document("suppliers", supplier["id"], {"name": new_name})
    for category in await find_documents("categories", {"supplier": old_name}):
        await update_document("categories", category["id"], {"supplier": new_name})

    logger.info(f"[SUPPLIER_RENAMED] {old_name} -> {new_name}")
    return True


async def remove_supplier(name: str) -> bool:
    supplier = await find_one_document("suppliers", {"name": name})
    if not supplier:
        return False

    for category in await find_documents("categories", {"supplier": name}):
        await delete_document("categories", category["id"])
    await delete_document("suppliers", supplier["id"])

    logger.info(f"[SUPPLIER_REMOVED] name={name}")
    return True


async def list_categories(supplier: Optional[str] = None) -> List[Dict]:
    query = {"supplier": supplier} if supplier else {}
    return await find_documents("categories", query, sort=[("supplier", 1), ("name", 1)])


async def add_category(name: str, supplier: str) -> Optional[Dict]:
    """Returns None if the supplier is unknown or the category already exists"""
    name, supplier = name.strip(), supplier.strip()
    if not await find_one_document("suppliers", {"name": supplier}):
        return None
    if await find_one_document("categories", {"name": name, "supplier": supplier}):
        return None
    category_id = await add_document("categories", {"name": name, "supplier": supplier})
    return {"id": category_id, "name": name, "supplier": supplier}


async def rename_category(supplier: str, old_name: str, new_name: str) -> bool:
    category = await find_one_document("categories", {"name": old_name, "supplier": supplier})
    if not category:
        return False
    await update_document("categories", category["id"], {"name": new_name.strip()})
    return True


async def remove_category(supplier: str, name: str) -> bool:
    category = await find_one_document("categories", {"name": name, "supplier": supplier})
    if not category:
        return False
    return await delete_document("categories", category["id"])
