"""顾问系统提示词默认值

模板片段按渲染顺序排列，变量用 str.format 填充。
语气与回复长度映射表在模块加载时构建，运行期不修改。
"""

from types import MappingProxyType

TONE_PHRASES = MappingProxyType(
    {
        "friendly": "friendly, warm, and helpful",
        "professional": "professional, knowledgeable, and expert",
        "casual": "casual, approachable, and conversational",
        "detailed": "detailed, technical, and thorough",
    }
)
DEFAULT_TONE = "friendly"

LENGTH_INSTRUCTIONS = MappingProxyType(
    {
        "short": "very short, 1-2 sentences",
        "medium": "concise, 3-5 sentences",
        "long": "detailed and complete",
    }
)
DEFAULT_LENGTH = "medium"

ADVISOR_PROMPTS: dict[str, dict] = {
    "advisor.identity": {
        "category": "advisor",
        "name": "身份",
        "description": "顾问身份与门店",
        "variables": ["name", "store_name", "store_area"],
        "content": "You are {name}, the AI assistant for {store_name} in {store_area}.",
    },
    "advisor.store_facts": {
        "category": "advisor",
        "name": "门店信息",
        "description": "地址、电话、配送与服务",
        "variables": ["store_address", "store_phone", "store_delivery", "store_services"],
        "content": (
            "Store address: {store_address}\n"
            "Phone: {store_phone}\n"
            "Delivery: {store_delivery}\n"
            "Services: {store_services}"
        ),
    },
    "advisor.tone": {
        "category": "advisor",
        "name": "语气",
        "description": "语气短语来自 TONE_PHRASES",
        "variables": ["tone_phrase"],
        "content": "You are {tone_phrase}.",
    },
    "advisor.length": {
        "category": "advisor",
        "name": "回复长度",
        "description": "长度说明来自 LENGTH_INSTRUCTIONS",
        "variables": ["length_instruction"],
        "content": "Keep responses {length_instruction}.",
    },
    "advisor.avoid": {
        "category": "advisor",
        "name": "禁谈话题",
        "description": "为空时整段省略",
        "variables": ["topics"],
        "content": "NEVER discuss: {topics}",
    },
    "advisor.knowledge": {
        "category": "advisor",
        "name": "知识库",
        "description": "知识库为空时整段省略；条目按存储顺序拼接",
        "variables": ["entries"],
        "content": "KNOWLEDGE BASE:\n{entries}",
    },
    "advisor.knowledge_entry": {
        "category": "advisor",
        "name": "知识条目",
        "description": "单条问答",
        "variables": ["question", "answer"],
        "content": "Q: {question}\nA: {answer}",
    },
    "advisor.closing": {
        "category": "advisor",
        "name": "结束语",
        "description": "始终位于末尾",
        "variables": ["cta"],
        "content": "Always end with: {cta}",
    },
    "advisor.fallback_reply": {
        "category": "advisor",
        "name": "兜底回复",
        "description": "模型无返回或调用失败时的回复",
        "variables": ["store_phone"],
        "content": (
            "I apologize, I could not generate a response. "
            "Please call us at {store_phone} for assistance."
        ),
    },
}
