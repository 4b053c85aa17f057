from typing import Any, Dict, List

from supabase import Client


def _to_dict(user: Any) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": getattr(user, "email", None),
        "user_metadata": getattr(user, "user_metadata", None) or {},
        "banned_until": getattr(user, "banned_until", None),
        "created_at": getattr(user, "created_at", None),
        "last_sign_in_at": getattr(user, "last_sign_in_at", None),
    }


def list_users(client: Client) -> List[Dict[str, Any]]:
    return [_to_dict(user) for user in client.auth.admin.list_users()]


def create_user(client: Client, attributes: Dict[str, Any]) -> Dict[str, Any]:
    response = client.auth.admin.create_user(attributes)
    return _to_dict(response.user)


def update_user(client: Client, user_id: str, attributes: Dict[str, Any]) -> Dict[str, Any]:
    response = client.auth.admin.update_user_by_id(user_id, attributes)
    return _to_dict(response.user)


def delete_user(client: Client, user_id: str) -> None:
    client.auth.admin.delete_user(user_id)
