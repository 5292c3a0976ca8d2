"""
Layout Routes
Factory layouts, label resolution, card preview and batch export
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from badgeforge.auth import get_current_user
from badgeforge.engine.archetypes import Archetype, DEFAULT_THEMES
from badgeforge.engine.labels import label_for, resolve_card
from badgeforge.engine.layout import Layout
from badgeforge.schemas.layout import (
    DefaultLayoutResponse,
    ElementDeleteRequest,
    ElementDeleteResponse,
    ExportRequest,
    PreviewRequest,
    ResolveRequest,
    ResolveResponse,
)
from badgeforge.services.attendee_service import attendee_service
from badgeforge.services.card_renderer import card_renderer

router = APIRouter()


@router.get("/defaults/{archetype}", response_model=DefaultLayoutResponse)
async def get_default_layout(archetype: Archetype):
    """Factory layout and labels for an archetype"""
    layout = Layout.default_for(archetype)
    return {
        "archetype": archetype,
        "layout": layout.elements,
        "labels": {key: label_for(key) for key in layout.elements},
        "themes": DEFAULT_THEMES,
    }


@router.post("/resolve", response_model=ResolveResponse)
async def resolve_layout(request: ResolveRequest):
    """Display value of every visible element for one record"""
    elements = resolve_card(request.to_layout(), request.custom_labels, request.record)
    return {"elements": elements}


@router.post("/preview")
async def preview_card(request: PreviewRequest):
    """Render one card as PNG"""
    card = card_renderer.render_card(
        request.to_layout(),
        request.custom_labels,
        request.record,
        request.theme,
        request.width,
    )
    return Response(content=card_renderer.encode(card, "png"), media_type="image/png")


@router.post("/export")
async def export_cards(
    request: ExportRequest,
    current_user: dict = Depends(get_current_user)
):
    """Render stored records into a ZIP of card images"""
    records = await attendee_service.list_attendees(current_user["user_id"])
    if request.record_ids is not None:
        wanted = set(request.record_ids)
        records = [r for r in records if r.id in wanted]

    if not records:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No attendees to export"
        )

    archive = card_renderer.export_cards(
        records,
        request.to_layout(),
        request.custom_labels,
        theme=request.theme,
        filename_template=request.filename_template,
        fmt=request.format,
        width=request.width,
    )
    return Response(
        content=archive,
        media_type="application/zip",
        headers={"Content-Disposition": 'attachment; filename="id-cards.zip"'},
    )


@router.post("/elements/{key}/delete", response_model=ElementDeleteResponse)
async def delete_element(
    key: str,
    request: ElementDeleteRequest,
    current_user: dict = Depends(get_current_user)
):
    """
    Delete a card element and everything bound to it
    
    Removes the element's label column from every stored record, then its
    custom label, hidden entry and layout entry. Returns the updated editor
    state.
    """
    session = request.to_session()
    updated = await attendee_service.delete_layout_field(current_user["user_id"], session, key)
    return {
        "key": key,
        "layout": session.layout.elements,
        "element_counters": session.layout.counters(),
        "custom_labels": session.custom_labels,
        "hidden_fields": sorted(session.hidden_fields),
        "updated": updated,
    }
