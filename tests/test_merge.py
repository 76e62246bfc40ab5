"""
Tests for the per-field merge of completion-service guesses with
pattern results, and for the completion adapter itself.
"""

import json
from decimal import Decimal

import pytest

from conftest import FakeCompletionClient
from invoice_fields.model_inference import ExtractedInvoiceFields, FromModel, FromPattern, UNSET
from invoice_fields.model_inference.extractor import ModelFieldExtractor, parse_json_object
from invoice_fields.pattern_extraction import CategoryExtractor
from invoice_fields.postprocessor import FieldMerger
from invoice_fields.postprocessor.normalizers import DateNormalizer
from invoice_fields.utils.exceptions import CompletionServiceError


PATTERN_RESULTS = {
    'invoice_number': FromPattern("INV-2024-001", 10, "invoice_label"),
    'amount': FromPattern(Decimal("1234.56"), 12, "total_label"),
    'provider': UNSET,
    'billing_date': FromPattern("2024-03-15", 10, "billing_label"),
    'due_date': UNSET,
    'category': UNSET,
}


@pytest.fixture
def merger():
    return FieldMerger()


def test_pattern_results_only(merger):
    record = merger.merge(None, PATTERN_RESULTS)

    assert record.invoice_number == "INV-2024-001"
    assert record.amount == Decimal("1234.56")
    assert record.provider is None
    assert record.currency == "USD"
    assert record.sources == {
        'invoice_number': 'pattern',
        'amount': 'pattern',
        'billing_date': 'pattern',
    }


def test_invalid_model_amount_falls_back_to_pattern(merger):
    """A negative model amount is rejected; the other model fields are kept"""
    model_fields = {
        'amount': -50,
        'provider': "Amazon Web Services",
        'due_date': "2024-04-14",
    }

    record = merger.merge(model_fields, PATTERN_RESULTS)

    assert record.amount == Decimal("1234.56")
    assert record.sources['amount'] == 'pattern'
    assert record.provider == "Amazon Web Services"
    assert record.sources['provider'] == 'model'
    assert record.due_date == "2024-04-14"
    assert record.sources['due_date'] == 'model'


def test_valid_model_values_win(merger):
    model_fields = {
        'invoice_number': "INV 2024 777",
        'amount': "$2,000.50",
        'billing_date': "March 16, 2024",
    }

    record = merger.merge(model_fields, PATTERN_RESULTS)

    assert record.invoice_number == "INV-2024-777"
    assert record.amount == Decimal("2000.50")
    assert record.billing_date == "2024-03-16"
    assert all(record.sources[f] == 'model' for f in model_fields)


@pytest.mark.parametrize("field_name,value", [
    ('invoice_number', "15/03/2024"),
    ('invoice_number', "USD"),
    ('invoice_number', True),
    ('amount', "abc"),
    ('amount', 1e12),
    ('amount', 0),
    ('amount', 1e30),
    ('amount', [10]),
    ('amount', {"value": 10}),
    ('billing_date', "1999-12-31"),
    ('billing_date', "31/02/2024"),
    ('billing_date', 20240315),
    ('provider', "X"),
    ('provider', ["AWS"]),
])
def test_model_values_rejected(merger, field_name, value):
    is_valid, _ = merger.validate_model_value(field_name, value)
    assert not is_valid


def test_failing_check_falls_back_to_pattern():
    class BrokenDateNormalizer(DateNormalizer):
        def normalize(self, date_str):
            raise RuntimeError("boom")

    merger = FieldMerger(date_normalizer=BrokenDateNormalizer())

    record = merger.merge({'billing_date': "2024-03-01", 'provider': "AWS"}, PATTERN_RESULTS)

    assert record.billing_date == "2024-03-15"
    assert record.sources['billing_date'] == 'pattern'
    assert record.provider == "AWS"


def test_category_follows_merged_provider(merger):
    categories = CategoryExtractor()
    record = merger.merge(
        {'provider': "GitHub"},
        PATTERN_RESULTS,
        category_fallback=lambda provider: categories.extract("", provider)
    )

    assert record.provider == "GitHub"
    assert record.category == "Development Tools"
    assert record.sources['category'] == 'pattern'


def test_model_category_wins_over_fallback(merger):
    record = merger.merge(
        {'category': "Hosting"},
        PATTERN_RESULTS,
        category_fallback=lambda provider: FromPattern("Cloud Services", 10, "provider_category")
    )
    assert record.category == "Hosting"


def test_currency_is_never_taken_from_model(merger):
    record = merger.merge({'currency': "INR", 'amount': 10}, PATTERN_RESULTS)
    assert record.currency == "USD"


class TestExtractedInvoiceFields:

    def test_currency_forced(self):
        assert ExtractedInvoiceFields(currency="INR").currency == "USD"

    def test_to_dict_omits_unset_fields(self):
        record = ExtractedInvoiceFields()
        record.apply('amount', FromModel(Decimal("10.50")))
        record.apply('provider', FromPattern("AWS", 10, "vendor_filename"))
        record.apply('due_date', UNSET)

        assert record.to_dict() == {'amount': 10.5, 'currency': "USD", 'provider': "AWS"}
        assert record.to_dict(include_sources=True)['sources'] == {'amount': 'model', 'provider': 'pattern'}
        assert json.loads(record.to_json())['amount'] == 10.5

    def test_camel_case_keys(self):
        record = ExtractedInvoiceFields()
        record.apply('invoice_number', FromPattern("INV-1234", 9, "inv_sequence"))
        record.apply('billing_date', FromPattern("2024-03-15", 10, "billing_label"))

        data = record.to_dict()
        assert data['invoiceNumber'] == "INV-1234"
        assert data['billingDate'] == "2024-03-15"

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            ExtractedInvoiceFields().apply('total', FromModel(1))

    def test_missing_fields(self):
        record = ExtractedInvoiceFields()
        record.apply('provider', FromModel("AWS"))
        assert 'provider' not in record.missing_fields
        assert 'amount' in record.missing_fields


class TestParseJsonObject:

    def test_plain_json(self):
        assert parse_json_object('{"amount": 10}') == {'amount': 10}

    def test_code_fence(self):
        assert parse_json_object('```json\n{"amount": 10}\n```') == {'amount': 10}

    def test_surrounding_text(self):
        content = 'Here you go: {"provider": "AWS {cloud}"} hope it helps'
        assert parse_json_object(content) == {'provider': "AWS {cloud}"}

    @pytest.mark.parametrize("content", ["", "   ", "[1, 2]", "no json here", "{broken"])
    def test_not_an_object(self, content):
        assert parse_json_object(content) is None


class TestModelFieldExtractor:

    def test_guesses_are_mapped_to_field_names(self):
        client = FakeCompletionClient(json.dumps({
            "invoiceNumber": "INV-9",
            "amount": 99.5,
            "provider": None,
            "billingDate": "2024-03-15",
            "dueDate": None,
            "category": "Cloud Services",
        }))

        guesses = ModelFieldExtractor(client).extract("Invoice text", "a.pdf")

        assert guesses == {
            'invoice_number': "INV-9",
            'amount': 99.5,
            'billing_date': "2024-03-15",
            'category': "Cloud Services",
        }

    def test_prompt_is_head_truncated(self):
        client = FakeCompletionClient('{}')
        ModelFieldExtractor(client, max_prompt_chars=10).extract("A" * 10 + "B" * 40, "scan.pdf")

        prompt = client.prompts[0]
        assert "AAAAAAAAAA ... (truncated)" in prompt
        assert "B" * 5 not in prompt
        assert "Filename: scan.pdf" in prompt

    def test_non_object_answer_raises(self):
        client = FakeCompletionClient("I could not find anything")
        with pytest.raises(CompletionServiceError):
            ModelFieldExtractor(client).extract("Invoice text", "a.pdf")

    def test_client_errors_propagate(self):
        client = FakeCompletionClient(error=CompletionServiceError("timeout", "fake"))
        with pytest.raises(CompletionServiceError):
            ModelFieldExtractor(client).extract("Invoice text", "a.pdf")
