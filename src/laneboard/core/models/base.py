"""模型基类 -- 对外 JSON 使用 camelCase，入参同时接受 camelCase 与 snake_case"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """HTTP 与实时消息共用的模型基类"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """序列化为对外 JSON 结构"""
        return self.model_dump(mode="json", by_alias=True)
