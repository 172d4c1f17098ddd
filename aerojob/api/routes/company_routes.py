"""
Company Routes

GET /companies - List companies (name, industry, location filters)
GET /companies/{company_id} - Get company details
POST /companies - Create company (admin only)
PUT /companies/{company_id} - Update company (admin only)
DELETE /companies/{company_id} - Delete company and its jobs (admin only)
"""

import re
from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from typing import List, Optional

from aerojob.db.postgres import get_db_session, execute_raw_sql, fetch_one
from aerojob.core.auth import get_current_admin
from aerojob.schemas.schemas import CompanyCreate, CompanyUpdate, CompanyResponse, MessageResponse

router = APIRouter(prefix="/companies", tags=["Companies"])

COMPANY_COLUMNS = """
    company_id, name, industry, location, description, website,
    email, phone, logo_url, is_active, created_at
"""


def normalize_website(website: Optional[str]) -> Optional[str]:
    """'acme.com' -> 'https://acme.com'; URLs with a scheme are kept."""
    if not website or not website.strip():
        return None
    website = website.strip()
    if not re.match(r"^https?://", website, re.IGNORECASE):
        website = f"https://{website}"
    return website


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


@router.get("", response_model=List[CompanyResponse])
async def list_companies(
    q: Optional[str] = Query(None, description="Search in name"),
    industry: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    include_inactive: bool = Query(False)
):
    """List companies alphabetically."""
    sql = f"SELECT {COMPANY_COLUMNS} FROM companies WHERE 1 = 1"
    params = {}

    if not include_inactive:
        sql += " AND is_active = TRUE"
    if q:
        sql += " AND name ILIKE :q"
        params["q"] = f"%{q}%"
    if industry:
        sql += " AND industry ILIKE :industry"
        params["industry"] = f"%{industry}%"
    if location:
        sql += " AND location ILIKE :location"
        params["location"] = f"%{location}%"

    sql += " ORDER BY name ASC"
    return [CompanyResponse(**r) for r in execute_raw_sql(sql, params)]


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(company_id: int):
    """Get details of a specific company."""
    row = fetch_one(f"SELECT {COMPANY_COLUMNS} FROM companies WHERE company_id = :id", {"id": company_id})
    if not row:
        raise HTTPException(status_code=404, detail="Company not found")
    return CompanyResponse(**row)


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(data: CompanyCreate, admin: dict = Depends(get_current_admin)):
    """Create a company. Names are unique."""
    try:
        row = fetch_one(
            f"""
            INSERT INTO companies (name, industry, location, description, website, email, phone, logo_url)
            VALUES (:name, :industry, :location, :description, :website, :email, :phone, :logo_url)
            RETURNING {COMPANY_COLUMNS}
            """,
            {
                "name": data.name.strip(),
                "industry": _clean(data.industry),
                "location": _clean(data.location),
                "description": _clean(data.description),
                "website": normalize_website(data.website),
                "email": data.email.lower() if data.email else None,
                "phone": _clean(data.phone),
                "logo_url": _clean(data.logo_url)
            }
        )
    except IntegrityError:
        raise HTTPException(status_code=400, detail="A company with this name already exists")

    return CompanyResponse(**row)


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(company_id: int, data: CompanyUpdate, admin: dict = Depends(get_current_admin)):
    """Update a company. Only supplied fields change."""
    updates = []
    params = {"id": company_id}

    for field in ["name", "industry", "location", "description", "phone", "logo_url"]:
        value = getattr(data, field)
        if value is not None:
            updates.append(f"{field} = :{field}")
            params[field] = value.strip()

    if data.website is not None:
        updates.append("website = :website")
        params["website"] = normalize_website(data.website)
    if data.email is not None:
        updates.append("email = :email")
        params["email"] = data.email.lower()
    if data.is_active is not None:
        updates.append("is_active = :is_active")
        params["is_active"] = data.is_active

    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    try:
        row = fetch_one(
            f"""
            UPDATE companies SET {', '.join(updates)}, updated_at = CURRENT_TIMESTAMP
            WHERE company_id = :id
            RETURNING {COMPANY_COLUMNS}
            """,
            params
        )
    except IntegrityError:
        raise HTTPException(status_code=400, detail="A company with this name already exists")

    if not row:
        raise HTTPException(status_code=404, detail="Company not found")
    return CompanyResponse(**row)


@router.delete("/{company_id}", response_model=MessageResponse)
async def delete_company(company_id: int, admin: dict = Depends(get_current_admin)):
    """Delete a company. Cascades to its jobs."""
    with get_db_session() as db:
        result = db.execute(text("DELETE FROM companies WHERE company_id = :id"), {"id": company_id})
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Company not found")

    return MessageResponse(message="Company deleted successfully")
