"""Pydantic models for the Google Chat event payload."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _ChatModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ChatUser(_ChatModel):
    name: str
    display_name: str = Field("", alias="displayName")


class SlashCommand(_ChatModel):
    command_id: Optional[str] = Field(None, alias="commandId")
    command_name: Optional[str] = Field(None, alias="commandName")


class ChatMessage(_ChatModel):
    text: str = ""
    sender: ChatUser
    slash_command: Optional[SlashCommand] = Field(None, alias="slashCommand")

    @property
    def command_text(self) -> str:
        if self.slash_command and self.slash_command.command_name:
            return self.slash_command.command_name.strip()
        return self.text.strip()


class ChatEvent(_ChatModel):
    type: str
    message: Optional[ChatMessage] = None


__all__ = ["ChatEvent", "ChatMessage", "ChatUser", "SlashCommand"]
