"""
Members API endpoints

Thin HTTP surface over MemberService. Route order matters: the fixed
paths (/keys, /cache, /redis-template) are declared before /{member_id}.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from ...schemas import MemberDTO, MemberDeleted
from ...services.member_service import MemberService
from ..dependencies import get_member_service

router = APIRouter(prefix="/members", tags=["members"])


@router.get("", response_model=List[MemberDTO])
async def get_member_list(service: MemberService = Depends(get_member_service)):
    """Member list through the read-through cache."""
    return await service.get_member_list()


@router.get("/redis-template", response_model=List[MemberDTO])
async def get_member_list_by_redis_template(
    service: MemberService = Depends(get_member_service),
):
    """Fresh member list; also writes one member::<id> key per member."""
    return await service.get_member_list_by_redis_template()


@router.get("/keys", response_model=List[str])
async def show_all_keys_by_scanning(
    service: MemberService = Depends(get_member_service),
):
    return sorted(await service.show_all_keys_by_scanning())


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
async def cache_reset(service: MemberService = Depends(get_member_service)):
    await service.cache_reset()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/cache/renewal", response_model=List[MemberDTO])
async def cache_renewal(service: MemberService = Depends(get_member_service)):
    return await service.cache_renewal()


@router.get("/{member_id}/proxy", response_model=MemberDTO)
async def get_member_by_proxy(
    member_id: int, service: MemberService = Depends(get_member_service)
):
    """One member looked up in the cached list."""
    return await service.get_member_by_proxy(member_id)


@router.get("/{member_id}/redis", response_model=MemberDTO)
async def get_member_from_redis(
    member_id: int, service: MemberService = Depends(get_member_service)
):
    """One member read directly from its member::<id> key."""
    return await service.get_member_from_redis(member_id)


@router.post("", response_model=MemberDTO, status_code=status.HTTP_201_CREATED)
async def create_member(
    payload: MemberDTO, service: MemberService = Depends(get_member_service)
):
    return await service.create_member(payload)


@router.put("/{member_id}", response_model=MemberDTO)
async def update_member(
    member_id: int,
    payload: MemberDTO,
    service: MemberService = Depends(get_member_service),
):
    return await service.update_member(member_id, payload)


@router.delete("/{member_id}", response_model=MemberDeleted)
async def delete_member(
    member_id: int, service: MemberService = Depends(get_member_service)
):
    return MemberDeleted(id=await service.delete_member(member_id))
