from __future__ import annotations

from ..utils import gid_tail

PLATFORM = "Shopify"
INITIAL_ENGAGEMENT_SCORE = 10

def _amount(money_set) -> float:
    # {"shopMoney": {"amount": "12.50"}} -> 12.5
    amount = ((money_set or {}).get("shopMoney") or {}).get("amount")
    if amount in (None, ""):
        return 0.0
    return float(amount)

def _float_or_zero(val) -> float:
    if val in (None, ""):
        return 0.0
    return float(val)

def transform_customer(node: dict | None, account_id: str, job_id: str) -> dict | None:
    if not node or not node.get("id"):
        return None
    location = None
    addr = node.get("defaultAddress")
    if addr:
        location = {
            "city": addr.get("city"),
            "country": addr.get("country"),
            "timezone": None,
            "state": addr.get("province"),
        }
    full_name = f"{node.get('firstName') or ''} {node.get('lastName') or ''}".strip()
    return {
        "account_id": account_id,
        "integration_id": job_id,
        "customer_id": gid_tail(node["id"]),
        "platform": PLATFORM,
        "full_name": full_name,
        "email": node.get("email"),
        "phone": node.get("phone"),
        "total_value": 0,
        "last_activity": node.get("updatedAt"),
        "status": "new",
        "engagement_score": INITIAL_ENGAGEMENT_SCORE,
        "location": location,
    }

def transform_order(node: dict | None, account_id: str, job_id: str) -> dict | None:
    """Order -> purchase Interaction. Orders without a customer yield None."""
    if not node or not node.get("id") or not node.get("customer"):
        return None
    line_items = []
    for edge in (node.get("lineItems") or {}).get("edges") or []:
        item = (edge or {}).get("node") or {}
        line_items.append({
            "title": item.get("title"),
            "quantity": item.get("quantity"),
            "price": _amount(item.get("originalTotalSet")),
        })
    summary = ", ".join(f"{li['quantity']}x {li['title']}" for li in line_items)
    name = node.get("name")
    return {
        "account_id": account_id,
        "integration_id": job_id,
        "customer_id": gid_tail(node["customer"]["id"]),
        "interaction_type": "purchase",
        "platform": PLATFORM,
        "title": f"Shopify Order {name}",
        "description": f"Online store purchase with {len(line_items)} item(s): {summary}.",
        "value": _amount(node.get("totalPriceSet")),
        "outcome": "positive",
        "interaction_date": node.get("createdAt"),
        "metadata": {"order_id": gid_tail(node["id"]), "order_name": name},
        "line_items": line_items,
    }

def transform_product(node: dict | None, account_id: str, job_id: str) -> dict | None:
    if not node or not node.get("id"):
        return None
    variants = (node.get("variants") or {}).get("nodes") or []
    first = variants[0] if variants else None
    images = (node.get("images") or {}).get("nodes") or []
    return {
        "account_id": account_id,
        "integration_id": job_id,
        "product_id": gid_tail(node["id"]),
        "title": node.get("title"),
        "description": node.get("description") or "",
        "vendor": node.get("vendor"),
        "product_type": node.get("productType"),
        "price": _float_or_zero(first.get("price")) if first else 0,
        "compare_at_price": _float_or_zero(first.get("compareAtPrice")) if first else 0,
        "inventory_quantity": (first.get("inventoryQuantity") or 0) if first else 0,
        "platform": PLATFORM,
        "status": (node.get("status") or "").lower(),
        "tags": node.get("tags") or [],
        "images": [img.get("url") for img in images if img],
        "variants_count": (node.get("variantsCount") or {}).get("count") or 0,
    }

def external_key(kind: str, record: dict) -> dict:
    """Filter that identifies a record by its Shopify id, for upserts."""
    if kind == "Interaction":
        return {"metadata.order_id": record["metadata"]["order_id"]}
    if kind == "Product":
        return {"product_id": record["product_id"]}
    return {"customer_id": record["customer_id"]}
