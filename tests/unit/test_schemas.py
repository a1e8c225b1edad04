# tests/unit/test_schemas.py
"""Request schema validation: aliases, trimming and rejected inputs."""
import pytest
from pydantic import ValidationError

from src.apm_agent.application.schemas import RegisterAgentRequest
from src.apm_forum.application.schemas import CreateReplyRequest, CreateThreadRequest
from src.apm_market.application.schemas import CreateMarketRequest
from src.apm_resolution.application.schemas import ResolveMarketRequest
from src.apm_trading.application.schemas import PlaceTradeRequest


class TestPlaceTradeRequest:
    def test_aliases(self):
        req = PlaceTradeRequest.model_validate({"marketId": " MKT-1 ", "outcome": "Yes", "stake": 5})
        assert req.market_id == "MKT-1"
        assert req.option == "Yes"
        assert req.side is None

    def test_label_alias(self):
        req = PlaceTradeRequest.model_validate({"market_id": "M", "label": "No", "stake": 1})
        assert req.option == "No"

    def test_non_string_side_falls_back_to_option(self):
        req = PlaceTradeRequest.model_validate(
            {"market_id": "M", "side": 1, "option": "Yes", "stake": 1}
        )
        assert req.side is None
        assert req.option == "Yes"

    def test_non_string_option_is_ignored(self):
        req = PlaceTradeRequest.model_validate(
            {"market_id": "M", "side": "no", "outcome": ["Yes"], "stake": 1}
        )
        assert req.side == "no"
        assert req.option is None

    @pytest.mark.parametrize("stake", [0, -1, "abc", None, "inf"])
    def test_bad_stake(self, stake):
        with pytest.raises(ValidationError):
            PlaceTradeRequest.model_validate({"market_id": "M", "side": "yes", "stake": stake})

    def test_blank_market_id(self):
        with pytest.raises(ValidationError):
            PlaceTradeRequest.model_validate({"market_id": "  ", "side": "yes", "stake": 1})

    def test_numeric_string_stake_is_accepted(self):
        req = PlaceTradeRequest.model_validate({"market_id": "M", "side": "yes", "stake": "2.5"})
        assert req.stake == 2.5


class TestRegisterAgentRequest:
    def test_name_alias_and_trim(self):
        assert RegisterAgentRequest.model_validate({"name": "  bot "}).agent_name == "bot"

    def test_blank_name(self):
        with pytest.raises(ValidationError):
            RegisterAgentRequest.model_validate({"agent_name": "   "})


class TestCreateMarketRequest:
    def test_defaults(self):
        req = CreateMarketRequest(question="Q?")
        assert (req.option_a, req.option_b) == ("Yes", "No")
        assert req.initial_yes_price == 0.5
        assert req.liquidity == 0.0

    @pytest.mark.parametrize("price", [0, 1, -0.1, 1.1])
    def test_price_bounds(self, price):
        with pytest.raises(ValidationError):
            CreateMarketRequest(question="Q?", initial_yes_price=price)

    def test_options_must_differ_after_trim(self):
        with pytest.raises(ValidationError):
            CreateMarketRequest(question="Q?", option_a="Up", option_b=" Up ")

    def test_negative_liquidity(self):
        with pytest.raises(ValidationError):
            CreateMarketRequest(question="Q?", liquidity=-1)


class TestResolveMarketRequest:
    def test_alias_and_trim(self):
        req = ResolveMarketRequest.model_validate({"marketId": "MKT-1", "outcome": " Yes "})
        assert req.market_id == "MKT-1"
        assert req.outcome == "Yes"

    def test_blank_outcome(self):
        with pytest.raises(ValidationError):
            ResolveMarketRequest.model_validate({"market_id": "MKT-1", "outcome": " "})


class TestForumRequests:
    def test_thread_body_aliases(self):
        for key in ("body", "content", "description"):
            req = CreateThreadRequest.model_validate({"title": "T", key: "text"})
            assert req.body == "text"

    def test_thread_category(self):
        assert CreateThreadRequest(title="T", body="B").category == "General"
        assert CreateThreadRequest(title="T", body="B", category="  ").category == "General"
        assert CreateThreadRequest(title="T", body="B", category=" Alpha ").category == "Alpha"

    def test_blank_title(self):
        with pytest.raises(ValidationError):
            CreateThreadRequest(title=" ", body="B")

    def test_reply_requires_body(self):
        with pytest.raises(ValidationError):
            CreateReplyRequest.model_validate({"content": "  "})
