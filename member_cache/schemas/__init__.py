from .member import MemberDTO, MemberDeleted, MemberDTOList

__all__ = ["MemberDTO", "MemberDeleted", "MemberDTOList"]
