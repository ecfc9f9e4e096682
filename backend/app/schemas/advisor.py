"""顾问（聊天助手）配置、知识库、对话与留言 Schema"""

from enum import StrEnum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Tone(StrEnum):
    """语气"""

    FRIENDLY = "friendly"
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    DETAILED = "detailed"


class ResponseLength(StrEnum):
    """回复长度"""

    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class KnowledgeCategory(StrEnum):
    """知识条目分类"""

    PRODUCT = "product"
    POLICY = "policy"
    RECOMMENDATION = "recommendation"
    CUSTOM = "custom"


class PersonaConfig(BaseModel):
    """顾问人设配置（KV 单例）

    tone / responseLength 以字符串保存，允许未知值；
    由提示词组装器在渲染时兜底，而不是在保存时拒绝。
    读取时兼容旧键名：length / avoid / customPrompt / cta / welcome。
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = ""
    tone: str = Tone.FRIENDLY.value
    response_length: str = Field(
        ResponseLength.MEDIUM.value,
        validation_alias=AliasChoices("responseLength", "response_length", "length"),
        serialization_alias="responseLength",
    )
    must_avoid_topics: str = Field(
        "",
        validation_alias=AliasChoices("mustAvoidTopics", "must_avoid_topics", "avoid"),
        serialization_alias="mustAvoidTopics",
    )
    custom_instructions: str = Field(
        "",
        validation_alias=AliasChoices("customInstructions", "custom_instructions", "customPrompt"),
        serialization_alias="customInstructions",
    )
    closing_call_to_action: str = Field(
        "",
        validation_alias=AliasChoices("closingCallToAction", "closing_call_to_action", "cta"),
        serialization_alias="closingCallToAction",
    )
    welcome_message: str = Field(
        "",
        validation_alias=AliasChoices("welcomeMessage", "welcome_message", "welcome"),
        serialization_alias="welcomeMessage",
    )

    @field_validator(
        "name",
        "tone",
        "response_length",
        "must_avoid_topics",
        "custom_instructions",
        "closing_call_to_action",
        "welcome_message",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return str(value)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class KnowledgeEntry(BaseModel):
    """知识库条目"""

    model_config = ConfigDict(extra="ignore")

    category: KnowledgeCategory = KnowledgeCategory.CUSTOM
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    priority: bool = False

    @field_validator("category", mode="before")
    @classmethod
    def _unknown_category(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() in KnowledgeCategory._value2member_map_:
            return value.strip().lower()
        return KnowledgeCategory.CUSTOM

    @field_validator("question", "answer", mode="after")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class ChatTurn(BaseModel):
    """一轮对话"""

    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(BaseModel):
    """前台聊天请求"""

    messages: list[ChatTurn] = Field(..., min_length=1)


class ChatPreviewRequest(BaseModel):
    """编辑器试聊请求（使用未保存的草稿配置）"""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., min_length=1)
    persona: dict[str, Any] | None = Field(
        None, validation_alias=AliasChoices("persona", "botRules")
    )
    knowledge: list[Any] | None = Field(
        None, validation_alias=AliasChoices("knowledge", "kbEntries")
    )


class ChatReply(BaseModel):
    """聊天回复"""

    reply: str
    degraded: bool = False


class PromptPreview(BaseModel):
    """组装后的系统提示词预览"""

    prompt: str
    knowledge_count: int = Field(0, serialization_alias="knowledgeCount")


class ContactInquiry(BaseModel):
    """留言表单"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., min_length=1)
    email: str = ""
    phone: str = ""
    message: str = ""
    topic: str = ""
    horse_type: str | None = Field(
        None,
        validation_alias=AliasChoices("horseType", "horse_type"),
        serialization_alias="horseType",
    )
    date: str | None = None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ContactReceipt(BaseModel):
    """留言提交结果"""

    ok: bool = True
    message: str = "Thank you! We will contact you shortly."
