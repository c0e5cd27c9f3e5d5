"""Member and relationship CRUD on the kuzu graph."""
import logging
import uuid
from datetime import datetime, timezone

import kuzu

from .tree_layout.models import RelType

logger = logging.getLogger(__name__)

OPTIONAL_FIELDS = ("birth_date", "death_date", "photo_url", "bio")
MEMBER_FIELDS = ("first_name", "last_name") + OPTIONAL_FIELDS

_MEMBER_RETURN = (
    "RETURN m.id, m.first_name, m.last_name, m.birth_date, m.death_date, "
    "m.photo_url, m.bio, m.created_at"
)
_REL_RETURN = "RETURN r.id, a.id, b.id, r.rel_type, r.created_at"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_member(row) -> dict:
    return {
        "id": row[0],
        "first_name": row[1],
        "last_name": row[2],
        "birth_date": row[3] or None,
        "death_date": row[4] or None,
        "photo_url": row[5] or None,
        "bio": row[6] or None,
        "created_at": row[7],
    }


def _row_to_rel(row) -> dict:
    return {
        "id": row[0],
        "member_id": row[1],
        "related_member_id": row[2],
        "type": row[3],
        "created_at": row[4],
    }


def _require_name(value, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{field} is required")
    return value


# ── Members ──

def create_member(conn: kuzu.Connection, first_name: str, last_name: str,
                  birth_date: str | None = None, death_date: str | None = None,
                  photo_url: str | None = None, bio: str | None = None) -> dict:
    mid = str(uuid.uuid4())
    now = _now()
    params = {
        "id": mid,
        "first_name": _require_name(first_name, "first_name"),
        "last_name": _require_name(last_name, "last_name"),
        "birth_date": birth_date or "",
        "death_date": death_date or "",
        "photo_url": photo_url or "",
        "bio": bio or "",
        "ts": now,
    }
    conn.execute(
        "CREATE (m:Member {id: $id, first_name: $first_name, last_name: $last_name, "
        "birth_date: $birth_date, death_date: $death_date, photo_url: $photo_url, "
        "bio: $bio, created_at: $ts})",
        params
    )
    logger.info("Created member %s", mid)
    return get_member(conn, mid)


def get_member(conn: kuzu.Connection, member_id: str) -> dict | None:
    result = conn.execute(
        "MATCH (m:Member) WHERE m.id = $id " + _MEMBER_RETURN,
        {"id": member_id}
    )
    if result.has_next():
        return _row_to_member(result.get_next())
    return None


def list_members(conn: kuzu.Connection) -> list[dict]:
    """All members, oldest first."""
    result = conn.execute(
        "MATCH (m:Member) " + _MEMBER_RETURN + " ORDER BY m.created_at, m.id"
    )
    members = []
    while result.has_next():
        members.append(_row_to_member(result.get_next()))
    return members


def update_member(conn: kuzu.Connection, member_id: str, changes: dict) -> dict | None:
    """Apply a partial update.

    Keys absent from `changes` keep their stored value. A None first or last
    name also keeps the stored value; None for an optional field clears it.
    """
    existing = get_member(conn, member_id)
    if not existing:
        return None

    merged = {f: existing[f] for f in MEMBER_FIELDS}
    for field in ("first_name", "last_name"):
        if changes.get(field) is not None:
            merged[field] = _require_name(changes[field], field)
    for field in OPTIONAL_FIELDS:
        if field in changes:
            merged[field] = changes[field]

    params = {f: merged[f] or "" for f in MEMBER_FIELDS}
    params["id"] = member_id
    conn.execute(
        "MATCH (m:Member) WHERE m.id = $id "
        "SET m.first_name = $first_name, m.last_name = $last_name, "
        "m.birth_date = $birth_date, m.death_date = $death_date, "
        "m.photo_url = $photo_url, m.bio = $bio",
        params
    )
    logger.info("Updated member %s", member_id)
    return get_member(conn, member_id)


def delete_member(conn: kuzu.Connection, member_id: str) -> bool:
    """Delete a member and every relationship touching it."""
    if not get_member(conn, member_id):
        return False
    conn.execute("MATCH (m:Member) WHERE m.id = $id DETACH DELETE m", {"id": member_id})
    logger.info("Deleted member %s", member_id)
    return True


# ── Relationships ──

def _relationship_exists(conn: kuzu.Connection, from_id: str, to_id: str, rel_type: RelType) -> bool:
    # spouse links count in either direction
    arrow = "-" if rel_type == RelType.SPOUSE else "->"
    result = conn.execute(
        f"MATCH (a:Member)-[r:RELATED]{arrow}(b:Member) "
        "WHERE a.id = $from_id AND b.id = $to_id AND r.rel_type = $rel_type "
        "RETURN count(*)",
        {"from_id": from_id, "to_id": to_id, "rel_type": rel_type.value}
    )
    return result.has_next() and result.get_next()[0] > 0


def create_relationship(conn: kuzu.Connection, member_id: str, related_member_id: str,
                        rel_type: str) -> dict:
    """Link two members. For PARENT_CHILD, member_id is the parent."""
    rt = RelType(rel_type)
    if not member_id or not related_member_id:
        raise ValueError("memberId and relatedMemberId are required")
    if member_id == related_member_id:
        raise ValueError("A member cannot be related to themselves")
    for mid in (member_id, related_member_id):
        if not get_member(conn, mid):
            raise ValueError(f"Member {mid} not found")
    if _relationship_exists(conn, member_id, related_member_id, rt):
        raise ValueError("Relationship already exists")

    rid = str(uuid.uuid4())
    conn.execute(
        "MATCH (a:Member), (b:Member) WHERE a.id = $from_id AND b.id = $to_id "
        "CREATE (a)-[:RELATED {id: $id, rel_type: $rel_type, created_at: $ts}]->(b)",
        {"from_id": member_id, "to_id": related_member_id, "id": rid,
         "rel_type": rt.value, "ts": _now()}
    )
    logger.info("Created %s relationship %s", rt.value, rid)
    return get_relationship(conn, rid)


def get_relationship(conn: kuzu.Connection, rel_id: str) -> dict | None:
    result = conn.execute(
        "MATCH (a:Member)-[r:RELATED]->(b:Member) WHERE r.id = $id " + _REL_RETURN,
        {"id": rel_id}
    )
    if result.has_next():
        return _row_to_rel(result.get_next())
    return None


def list_relationships(conn: kuzu.Connection) -> list[dict]:
    result = conn.execute(
        "MATCH (a:Member)-[r:RELATED]->(b:Member) " + _REL_RETURN + " ORDER BY r.created_at, r.id"
    )
    rels = []
    while result.has_next():
        rels.append(_row_to_rel(result.get_next()))
    return rels


def delete_relationship(conn: kuzu.Connection, rel_id: str) -> bool:
    if not get_relationship(conn, rel_id):
        return False
    conn.execute(
        "MATCH (a:Member)-[r:RELATED]->(b:Member) WHERE r.id = $id DELETE r",
        {"id": rel_id}
    )
    logger.info("Deleted relationship %s", rel_id)
    return True


def get_snapshot(conn: kuzu.Connection) -> dict:
    """Current members and relationships, as served to the tree view."""
    return {"members": list_members(conn), "relationships": list_relationships(conn)}
