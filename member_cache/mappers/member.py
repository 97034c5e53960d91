"""
Member mapper - converts between the ORM entity and the transfer object.
"""

from ..models import Member
from ..schemas import MemberDTO


class MemberMapper:
    """Stateless Member <-> MemberDTO conversion."""

    @staticmethod
    def to_dto(member: Member) -> MemberDTO:
        return MemberDTO.model_validate(member)

    @staticmethod
    def to_entity(dto: MemberDTO) -> Member:
        """Build a new entity through the Member factory; dto.id is ignored."""
        return Member.create(
            username=dto.username,
            telephone=dto.telephone,
            age=dto.age,
            gender=dto.gender,
        )


member_mapper = MemberMapper()
