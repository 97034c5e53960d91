from .member import MemberMapper, member_mapper

__all__ = ["MemberMapper", "member_mapper"]
