from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON uses camelCase; Python attributes stay snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CurrentSeed(CamelModel):
    server_seed_hash: str
    client_seed: str
    nonce: int


class RotateRequest(CamelModel):
    client_seed: Optional[str] = None


class RotateResponse(CamelModel):
    revealed_server_seed: str
    revealed_server_seed_hash: str
    final_nonce: int
    server_seed_hash: str
    client_seed: str


class VerifyRequest(CamelModel):
    server_seed: str
    server_seed_hash: str
    client_seed: str
    nonce: Union[int, str]
    game_type: str
    expected_outcome: Union[float, List[int], str]
    game_params: Dict[str, Any] = Field(default_factory=dict)


class VerifyResponse(CamelModel):
    is_valid: bool
    server_seed_match: bool
    outcome_match: bool
    details: str
    computed_outcome: Union[float, int, List[int], None] = None
