"""Section statistics routes (admin only)."""

from typing import List

from fastapi import APIRouter

from core.dependencies import AdminDep, StoreDep
from schemas.common import Section
from schemas.stats import SectionStats
from utils import derived_views

router = APIRouter(prefix="/api/stats", tags=["Stats"])


@router.get("", response_model=List[SectionStats], summary="Statistics for every section")
async def list_section_stats(store: StoreDep, current_user: AdminDep) -> List[SectionStats]:
    return derived_views.all_section_stats(store)


@router.get("/{section}", response_model=SectionStats, summary="Statistics for one section")
async def get_section_stats(
    section: Section, store: StoreDep, current_user: AdminDep
) -> SectionStats:
    return derived_views.section_stats(store, section)
