"""Data models for SMS Forwarder."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass
class Message:
    """A single SMS read from the device inbox."""

    id: str  # Platform row id, stable across reads
    sender: str  # Originating address
    body: str
    timestamp: int  # Epoch milliseconds
    sent: bool = False  # Transient, never persisted


@dataclass
class User:
    firstname: str
    lastname: str
    email: str
    profile_pic_url: str | None = None


@dataclass
class AuthResponse:
    """Body returned by the authenticate endpoint."""

    code: str
    access_token: str
    refresh_token: str
    user: User | None = None
    message: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> AuthResponse:
        user_data = data.get("user") or None
        user = None
        if isinstance(user_data, dict):
            user = User(
                firstname=user_data.get("firstname", ""),
                lastname=user_data.get("lastname", ""),
                email=user_data.get("email", ""),
                profile_pic_url=user_data.get("profilePicURL"),
            )
        return cls(
            code=str(data.get("code", "")),
            access_token=data.get("access_token", ""),
            refresh_token=data.get("refresh_token", ""),
            user=user,
            message=data.get("message"),
        )


class TimeFilter(Enum):
    TODAY = "today"
    YESTERDAY = "yesterday"
    LAST_7_DAYS = "last-7-days"
    THIS_MONTH = "this-month"
    LAST_MONTH = "last-month"


# --- UI result state ---


class UiState:
    """Base for the single current result state of a session."""


@dataclass(frozen=True)
class Initial(UiState):
    pass


@dataclass(frozen=True)
class Loading(UiState):
    pass


@dataclass(frozen=True)
class Success(UiState):
    message: str


@dataclass(frozen=True)
class Error(UiState):
    message: str


# --- Per-operation state ---


class Operation(Enum):
    SAVE_USER_DATA = "save_user_data"
    FETCH_TOKEN = "fetch_token"
    FETCH_SENDERS = "fetch_senders"
    FETCH_SMS = "fetch_sms"
    SEND_SMS = "send_sms"
    HIDE_SMS = "hide_sms"


class OperationState:
    """Base for the lifecycle of one tracked operation."""


@dataclass(frozen=True)
class Idle(OperationState):
    pass


@dataclass(frozen=True)
class Running(OperationState):
    target: str | None = None  # Message id for send/hide


@dataclass(frozen=True)
class Succeeded(OperationState):
    message: str


@dataclass(frozen=True)
class Failed(OperationState):
    reason: str
