"""Tests for MaskEngine."""

import logging

import pytest

from fieldmask.core.config import MaskingConfig, PolicyConfig
from fieldmask.core.exceptions import DeclarationError, TraversalError, UnknownStrategyError
from fieldmask.core.policies import MaskPolicy
from fieldmask.masking.engine import MaskEngine
from tests.utils.records import (
    Address,
    ApiKey,
    BrokenRecord,
    Card,
    Customer,
    FrozenPatient,
    FrozenSecret,
    LegacyAccount,
    Login,
    Misdeclared,
    Opaque,
    Patient,
)


class TestMask:
    """Default-policy masking of nested values."""

    def test_customer_top_level_fields(self, engine: MaskEngine, customer: Customer) -> None:
        engine.mask(customer)

        assert customer.name == "Jo****oe"
        assert customer.email == "j*******@example.com"
        assert customer.phone == "******3210"
        assert customer.dob == "****-**-31"
        assert customer.notes == "prefers email"

    def test_declaration_on_non_string_is_ignored(
        self, engine: MaskEngine, customer: Customer
    ) -> None:
        engine.mask(customer)
        assert customer.age == 42

    def test_nested_record(self, engine: MaskEngine, customer: Customer) -> None:
        engine.mask(customer)

        assert customer.home.street == "22" + "*" * 13 + "et"
        assert customer.home.city == "London"
        assert customer.home.postcode == "******"

    def test_records_inside_lists_and_dicts(self, engine: MaskEngine, customer: Customer) -> None:
        engine.mask(customer)

        assert customer.previous_addresses[0].street == "12" + "*" * 14 + "ce"
        spouse = customer.contacts["spouse"]
        assert spouse.name == "Ja****oe"
        assert spouse.email == "j***@example.com"

    def test_plain_strings_in_lists_are_not_fields(
        self, engine: MaskEngine, customer: Customer
    ) -> None:
        engine.mask(customer)
        assert customer.aliases == ["Johnny", "JD"]

    def test_returns_same_object(self, engine: MaskEngine, customer: Customer) -> None:
        assert engine.mask(customer) is customer

    def test_empty_strings_stay_empty(self, engine: MaskEngine) -> None:
        customer = engine.mask(Customer())
        assert customer.name == ""
        assert customer.email == ""

    def test_top_level_list_and_dict(self, engine: MaskEngine) -> None:
        cards = [Card(number="4111111111111111")]
        by_id = {"a": Address(street="1 Main St")}

        engine.mask(cards)
        engine.mask(by_id)

        assert cards[0].number == "************1111"
        assert by_id["a"].street == "1 *****St"

    @pytest.mark.parametrize("value", [None, "john.doe@example.com", b"raw", 42, 3.5])
    def test_scalars_and_none_are_noops(self, engine: MaskEngine, value) -> None:
        assert engine.mask(value) == value

    def test_opaque_objects_are_leaves(self, engine: MaskEngine) -> None:
        opaque = Opaque("secret")
        engine.mask(opaque)
        assert opaque.secret == "secret"

    def test_unknown_declared_strategy_leaves_field(self, engine: MaskEngine) -> None:
        login = engine.mask(Login(user="ada", password="hunter2", api_token="abc123", legacy="x"))

        assert login.user == "ada"
        assert login.password == "*******"
        assert login.api_token == "******"
        assert login.legacy == "x"

    def test_private_fields_untouched(self, engine: MaskEngine) -> None:
        login = engine.mask(Login(_salt="pepper"))
        assert login._salt == "pepper"

    def test_frozen_records_untouched(self, engine: MaskEngine) -> None:
        secret = FrozenSecret("s3cret")
        patient = FrozenPatient(name="Ada")

        engine.mask([secret, patient])

        assert secret.value == "s3cret"
        assert patient.name == "Ada"

    def test_pydantic_model(self, engine: MaskEngine) -> None:
        patient = engine.mask(
            Patient(name="Ada Lovelace", dob="1815-12-10", mrn="MRN-1", insurer_id="INS-9")
        )

        assert patient.name == "Ad********ce"
        assert patient.dob == "****-**-10"
        assert patient.mrn == "MRN-1"
        assert patient.insurer_id == "INS-9"

    def test_mask_tags_object(self, engine: MaskEngine) -> None:
        account = engine.mask(LegacyAccount("Ada Lovelace", "pw"))

        assert account.owner == "Ad********ce"
        assert account.password == "**"
        assert account.plan == "basic"
        assert account._cache == "internal"

    def test_protocol_record(self, engine: MaskEngine) -> None:
        key = engine.mask(ApiKey("abc", "ci"))
        assert key.key == "***"
        assert key.label == "ci"

    def test_broken_protocol_record_raises(self, engine: MaskEngine) -> None:
        with pytest.raises(TraversalError):
            engine.mask(BrokenRecord())

    def test_custom_strategy(self, engine: MaskEngine) -> None:
        engine.register("partial", lambda s: "[redacted]")
        customer = engine.mask(Customer(name="John Doe"))
        assert customer.name == "[redacted]"

    def test_default_policy_is_applied(self, catalog) -> None:
        engine = MaskEngine(catalog, default_policy=MaskPolicy(overrides={"notes": "full"}))
        customer = engine.mask(Customer(notes="vip"))
        assert customer.notes == "***"


class TestMaskWithOverrides:
    def test_none_override_suppresses_field(self, engine: MaskEngine, customer: Customer) -> None:
        engine.mask_with_overrides(customer, {"email": "none"})

        assert customer.email == "john.doe@example.com"
        assert customer.name == "Jo****oe"
        # nested records follow their own declarations
        assert customer.contacts["spouse"].email == "j***@example.com"

    def test_overrides_match_top_level_names_only(self, engine: MaskEngine) -> None:
        customer = engine.mask_with_overrides(
            Customer(home=Address(street="221B Baker Street")), {"street": "none"}
        )
        assert customer.home.street == "22" + "*" * 13 + "et"

    def test_override_does_not_mask_nested_undeclared_field(
        self, engine: MaskEngine, customer: Customer
    ) -> None:
        engine.mask_with_overrides(customer, {"city": "full"})
        assert customer.home.city == "London"

    def test_records_in_top_level_list_take_overrides(self, engine: MaskEngine) -> None:
        customers = [Customer(email="john.doe@example.com"), Customer(email="jane@example.com")]
        engine.mask_with_overrides(customers, {"email": "none"})
        assert [c.email for c in customers] == ["john.doe@example.com", "jane@example.com"]

    def test_override_replaces_strategy(self, engine: MaskEngine) -> None:
        customer = engine.mask_with_overrides(Customer(name="John Doe"), {"name": "full"})
        assert customer.name == "********"

    def test_override_masks_undeclared_field(self, engine: MaskEngine) -> None:
        customer = engine.mask_with_overrides(Customer(notes="prefers email"), {"notes": "partial"})
        assert customer.notes == "pr*********il"

    def test_unknown_override_keeps_field(self, engine: MaskEngine) -> None:
        customer = engine.mask_with_overrides(Customer(name="John Doe"), {"name": "rot13"})
        assert customer.name == "John Doe"

    def test_override_on_record_field_still_recurses(
        self, engine: MaskEngine, customer: Customer
    ) -> None:
        engine.mask_with_overrides(customer, {"home": "full"})
        assert customer.home.postcode == "******"

    def test_none_override_on_record_field_stops_descent(
        self, engine: MaskEngine, customer: Customer
    ) -> None:
        engine.mask_with_overrides(customer, {"home": "none"})
        assert customer.home.street == "221B Baker Street"
        assert customer.previous_addresses[0].street != "12 Grimmauld Place"

    def test_empty_overrides_equal_mask(self, engine: MaskEngine) -> None:
        first = engine.mask_with_overrides(Customer(name="John Doe"), None)
        second = engine.mask(Customer(name="John Doe"))
        assert first == second

    def test_override_on_non_string_is_ignored(self, engine: MaskEngine) -> None:
        customer = engine.mask_with_overrides(Customer(age=42), {"age": "full"})
        assert customer.age == 42

    def test_inherits_engine_disable_flag(self, catalog) -> None:
        engine = MaskEngine(catalog, default_policy=MaskPolicy(disable_masking=True))
        customer = engine.mask_with_overrides(Customer(name="John Doe"), {"name": "full"})
        assert customer.name == "John Doe"


class TestMaskWithPolicy:
    def test_disabled_policy_is_noop(self, engine: MaskEngine, customer: Customer) -> None:
        engine.mask_with_policy(customer, MaskPolicy(disable_masking=True))

        assert customer.name == "John Doe"
        assert customer.home.street == "221B Baker Street"

    def test_applied_fields_logged_at_debug(
        self, engine: MaskEngine, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="fieldmask.masking.engine"):
            engine.mask(Customer(name="John Doe"))

        assert "Masked 4 field(s) of Customer: ['name', 'email', 'phone', 'dob']" in caplog.text
        assert "John Doe" not in caplog.text

    def test_decision_reasons_logged_at_debug(
        self, engine: MaskEngine, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="fieldmask.masking.engine"):
            engine.mask_with_overrides(
                Customer(name="John Doe", email="j@x.io", notes="vip"),
                {"email": "none", "notes": "full"},
            )

        assert "Customer.name: apply (declaration)" in caplog.text
        assert "Customer.email: keep (override_none)" in caplog.text
        assert "Customer.notes: apply (override)" in caplog.text
        assert "j@x.io" not in caplog.text


class TestMalformedDeclarations:
    def test_mask_skips_malformed_declaration(self, engine: MaskEngine) -> None:
        record = engine.mask(Misdeclared(nickname="Ace", email="john.doe@example.com"))

        assert record.nickname == "Ace"
        assert record.email == "j*******@example.com"

    def test_skip_is_logged_at_debug(
        self, engine: MaskEngine, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="fieldmask.masking.traverser"):
            engine.mask(Misdeclared(nickname="Ace"))
        assert "Ignoring malformed declaration on Misdeclared.nickname" in caplog.text

    def test_mask_copy_skips_malformed_declaration(self, engine: MaskEngine) -> None:
        copied = engine.mask_copy(Misdeclared(nickname="Ace", email="john.doe@example.com"))
        assert copied.nickname == "Ace"
        assert copied.email == "j*******@example.com"

    def test_validation_still_raises(self, engine: MaskEngine) -> None:
        with pytest.raises(DeclarationError) as exc_info:
            engine.validate_declarations(Misdeclared)
        assert exc_info.value.context["field_name"] == "nickname"


class TestValidateDeclarations:
    def test_returns_unknown_fields(self, engine: MaskEngine) -> None:
        assert engine.validate_declarations(Login) == ["legacy"]

    def test_valid_type(self, engine: MaskEngine) -> None:
        assert engine.validate_declarations(Customer) == []
        assert engine.validate_declarations(Patient) == []

    def test_warns_on_unknown(
        self, engine: MaskEngine, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="fieldmask.masking.engine"):
            engine.validate_declarations(Login)
        assert "Login.legacy declares unknown strategy 'rot13'" in caplog.text

    def test_strict_raises(self, engine: MaskEngine) -> None:
        with pytest.raises(UnknownStrategyError) as exc_info:
            engine.validate_declarations(Login, strict=True)

        error = exc_info.value
        assert error.strategy_name == "rot13"
        assert error.context["field_name"] == "legacy"
        assert "full" in error.context["available"]

    def test_strict_engine_default(self, catalog) -> None:
        engine = MaskEngine(catalog, strict_declarations=True)
        with pytest.raises(UnknownStrategyError):
            engine.validate_declarations(Login)

    def test_registration_fixes_validation(self, engine: MaskEngine) -> None:
        engine.register("rot13", lambda s: s[::-1])
        assert engine.validate_declarations(Login, strict=True) == []


class TestEngineConstruction:
    def test_default_catalog_has_builtins(self) -> None:
        engine = MaskEngine()
        assert "partial" in engine.catalog
        assert "PII" in engine.catalog

    def test_engines_do_not_share_catalogs(self) -> None:
        first, second = MaskEngine(), MaskEngine()
        first.register("partial", lambda s: "X")
        assert second.mask(Customer(name="John Doe")).name == "Jo****oe"

    def test_from_config(self) -> None:
        config = MaskingConfig(
            aliases={"HR": "full"},
            strict_declarations=True,
            default_policy=PolicyConfig(overrides={"notes": "HR"}),
        )
        engine = MaskEngine.from_config(config)

        assert "HR" in engine.catalog
        assert engine.strict_declarations is True
        assert engine.mask(Customer(notes="vip")).notes == "***"

    def test_register_alias(self, engine: MaskEngine) -> None:
        engine.register_alias("SECRET", "full")
        assert engine.catalog.resolve("SECRET")("abc") == "***"
