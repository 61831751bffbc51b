"""Fixture data structures injected before each screenshot."""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# One substitution record for a dynamic route: parameter name -> scalar value
FixtureRecord = dict[str, Union[str, int, float, bool]]


class UserData(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    email: str


class AuthFixture(BaseModel):
    model_config = ConfigDict(extra="allow")

    user: UserData
    token: str
    permissions: Optional[list[str]] = None


class AuthFixtures(BaseModel):
    # Both keys are required; an unauthenticated session never carries data.
    authenticated: Optional[AuthFixture]
    unauthenticated: None


class GlobalStateFixture(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    theme: Optional[str] = None
    language: Optional[str] = None
    feature_flags: Optional[dict[str, bool]] = Field(default=None, alias="featureFlags")


class FixtureConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    auth: AuthFixtures
    dynamic_routes: dict[str, list[FixtureRecord]] = Field(alias="dynamicRoutes")
    global_state: Optional[GlobalStateFixture] = Field(default=None, alias="globalState")

    @classmethod
    def default(cls) -> "FixtureConfig":
        return cls(
            auth=AuthFixtures(authenticated=None, unauthenticated=None),
            dynamic_routes={},
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize using the wire names, omitting an absent globalState."""
        data = self.model_dump(mode="json", by_alias=True)
        if data.get("globalState") is None:
            data.pop("globalState", None)
        return data
