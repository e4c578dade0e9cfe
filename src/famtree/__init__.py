"""Family tree graph construction and hierarchical layout."""

from famtree.graph import assemble_graph, build_relationships, select_root
from famtree.layout import EMPTY_LAYOUT, FamilyLayout, LayoutNode, build_layout
from famtree.models import EMPTY_GRAPH, FamilyGraph, Gender, Person, Relationship, RelationshipType
from famtree.parsing import normalize_records
from famtree.reconcile import (
    FamilyTreeStore,
    MemberPlanError,
    NewMemberRelation,
    plan_new_member,
    reconcile_created_member,
)

__all__ = [
    "EMPTY_GRAPH",
    "EMPTY_LAYOUT",
    "FamilyGraph",
    "FamilyLayout",
    "FamilyTreeStore",
    "Gender",
    "LayoutNode",
    "MemberPlanError",
    "NewMemberRelation",
    "Person",
    "Relationship",
    "RelationshipType",
    "assemble_graph",
    "build_layout",
    "build_relationships",
    "normalize_records",
    "plan_new_member",
    "reconcile_created_member",
    "select_root",
]
