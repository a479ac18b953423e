"""
Pydantic models for data validation across the application.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Literal, Union


REQUIRED_LEAD_FIELDS = ("name", "email", "companyName", "mobileNumber", "service")


class ChatTurn(BaseModel):
    """One conversational turn as sent by the website widget."""

    model_config = ConfigDict(extra="ignore")

    role: Literal["user", "assistant"]
    content: Union[str, List[Dict[str, Any]]]

    @property
    def text(self) -> str:
        """Plain text of the turn, joining text blocks when content is structured."""
        if isinstance(self.content, str):
            return self.content
        return " ".join(
            str(block.get("text", "")) for block in self.content if block.get("type", "text") == "text"
        )

    def to_backend(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}


class ChatRequest(BaseModel):
    """Chat endpoint body. Extra top-level fields are forwarded to the backend."""

    model_config = ConfigDict(extra="allow")

    messages: List[ChatTurn] = Field(..., min_length=1)

    @property
    def latest_text(self) -> str:
        return self.messages[-1].text

    def passthrough_fields(self) -> Dict[str, Any]:
        extra = dict(self.model_extra or {})
        extra.pop("system", None)
        return extra


class AssistantCapabilities(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email_support: bool = Field(True, alias="emailSupport")
    lead_collection: bool = Field(True, alias="leadCollection")
    navigation: bool = True
    whatsapp_support: bool = Field(True, alias="whatsappSupport")


class AssistantRules(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    max_off_topic_responses: int = Field(3, alias="maxOffTopicResponses")
    off_topic_message: str = Field(..., alias="offTopicMessage")
    refocus_message: str = Field(..., alias="refocusMessage")


class AssistantProfile(BaseModel):
    """Persona the assistant presents to website visitors."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    role: str
    personality: str
    expertise: List[str]
    greeting: str
    capabilities: AssistantCapabilities
    rules: AssistantRules
    navigation_instructions: str = Field(..., alias="navigationInstructions")


class WebhookMessage(BaseModel):
    """Model for validating an incoming WhatsApp webhook message."""

    sender_id: str = Field(..., description="WhatsApp sender phone number")
    text: str = Field(..., min_length=1, description="Message text")

    @field_validator("sender_id")
    @classmethod
    def validate_sender_id(cls, v):
        """Validate sender ID is numeric."""
        v = v.strip().lstrip("+")
        if not v.isdigit():
            raise ValueError("Sender ID must be numeric")
        return v

    @field_validator("text")
    @classmethod
    def validate_text(cls, v):
        """Trim and validate message text."""
        v = v.strip()
        if not v:
            raise ValueError("Message text cannot be empty")
        return v
