from fastapi import APIRouter, Depends, Form
from fastapi.exceptions import HTTPException
from fastapi.responses import PlainTextResponse, Response

from grocery_list.core.groceries import DuplicateItemError, GroceryList
from app.dependencies import get_grocery_list

router = APIRouter(prefix="/groceries", tags=["groceries"])


def _get_or_404(groceries: GroceryList, item_id: str):
    item = groceries.get(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.get("")
def groceries_list(groceries: GroceryList = Depends(get_grocery_list)):
    return [item.to_dict() for item in groceries.items]


@router.post("", status_code=201)
def groceries_add(
    name: str = Form(""),
    groceries: GroceryList = Depends(get_grocery_list),
):
    try:
        item = groceries.add(name)
    except DuplicateItemError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if item is None:
        raise HTTPException(status_code=400, detail="Item name is required")
    return item.to_dict()


@router.get("/export")
def groceries_export(groceries: GroceryList = Depends(get_grocery_list)):
    return PlainTextResponse(groceries.format_text(), headers={
        "Content-Disposition": "attachment; filename=grocery_list.txt",
    })


@router.get("/{item_id}")
def groceries_detail(item_id: str, groceries: GroceryList = Depends(get_grocery_list)):
    return _get_or_404(groceries, item_id).to_dict()


@router.post("/{item_id}/edit")
def groceries_edit(
    item_id: str,
    name: str = Form(""),
    groceries: GroceryList = Depends(get_grocery_list),
):
    if not name:
        raise HTTPException(status_code=400, detail="Item name is required")
    item = groceries.rename(item_id, name)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item.to_dict()


@router.post("/{item_id}/toggle")
def groceries_toggle(item_id: str, groceries: GroceryList = Depends(get_grocery_list)):
    item = groceries.toggle_purchased(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item.to_dict()


@router.delete("/{item_id}", status_code=204)
def groceries_delete(item_id: str, groceries: GroceryList = Depends(get_grocery_list)):
    if not groceries.delete(item_id):
        raise HTTPException(status_code=404, detail="Item not found")
    return Response(status_code=204)
