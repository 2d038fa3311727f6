from .contact_record import ContactRecord
from .network_tree import CompanyNode, ContactNode, RootNode, TreeNode
from .network_summary import CompanyCount, NetworkSummary
from .network_result import NetworkResult

__all__ = [
    "ContactRecord",
    "CompanyNode",
    "ContactNode",
    "RootNode",
    "TreeNode",
    "CompanyCount",
    "NetworkSummary",
    "NetworkResult",
]
