from __future__ import annotations
"""Uniform response envelope.

success: {"success": true, "data": {...}, "message": "..."}
failure: {"success": false, "error": "<ErrorKind>", "message": "..."}
"""
from typing import Any, Dict, Optional, Tuple


def success_response(data: Optional[Dict[str, Any]] = None, message: Optional[str] = None, status: int = 200) -> Tuple[Dict[str, Any], int]:
    body: Dict[str, Any] = {'success': True, 'data': data if data is not None else {}}
    if message:
        body['message'] = message
    return body, status


def error_response(kind: str, message: str, status: int) -> Tuple[Dict[str, Any], int]:
    return {'success': False, 'error': kind, 'message': message}, status


__all__ = ['success_response', 'error_response']
