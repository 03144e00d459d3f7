"""Unit tests for the per-type heuristic parsers and result schemas."""

import pytest

from quill.extraction.contact import ContactResult, parse_contact
from quill.extraction.email import EmailResult, parse_email
from quill.extraction.event import EventResult, parse_event
from quill.extraction.expense import ExpenseResult, parse_expense
from quill.extraction.general import GeneralResult, parse_general
from quill.extraction.meeting import MeetingResult, parse_meeting, split_names
from quill.extraction.recipe import RecipeResult, parse_recipe
from quill.extraction.todo import Priority, TodoResult, parse_todos

BUSINESS_CARD = """Jane Smith
Senior Engineer
Acme Technologies Inc
555-123-4567
jane@acme.com
www.acme.com
123 Main Street
Springfield, IL 62704"""

PANCAKES = """Pancakes
Serves 4
Prep time: 10 minutes
Ingredients
2 cups flour
1 tsp salt
- 2 eggs
Directions
1. Mix dry ingredients
2. Fry on a hot griddle
Notes:
Great with syrup"""

MEETING_NOTES = """Weekly sync
Attendees: Bob, Alice and Carol
Agenda:
- budget
- hiring
AI: Bob to send numbers
Action items:
- book room
Date: 2024-06-14
Time: 10am
Location: Room 4"""


class TestExpense:
    """Tests for receipt-style expense parsing."""

    def test_diner_receipt(self) -> None:
        """Test merchant, amount and payment method from a short receipt."""
        result = parse_expense("Joe's Diner\n$12.50\ncash")
        assert result.merchant == "Joe's Diner"
        assert result.amount == 12.5
        assert result.currency == "USD"
        assert result.payment_method == "cash"
        assert result.has_minimum_data is True

    def test_date_category_and_card(self) -> None:
        """Test date category and card."""
        result = parse_expense("Blue Bottle\nTotal: $4.50\n2024-03-05\nlunch with team\nvisa")
        assert result.merchant == "Blue Bottle"
        assert result.amount == 4.5
        assert result.date == "2024-03-05"
        assert result.category == "food"
        assert result.payment_method == "card"

    def test_us_date_normalized(self) -> None:
        """Test us date normalized."""
        result = parse_expense("Hardware store\n$20\n3/5/2024")
        assert result.date == "2024-03-05"

    def test_suffix_currency(self) -> None:
        """Test an amount followed by a currency code."""
        result = parse_expense("Museum shop\n15.00 EUR")
        assert result.amount == 15.0
        assert result.currency == "EUR"

    @pytest.mark.parametrize(
        ("text", "amount", "currency"),
        [
            ("Best Buy\n$1234.56\ncard", 1234.56, "USD"),
            ("Hotel Roma\n€1500", 1500.0, "EUR"),
            ("Rent\nTotal: $2400.00", 2400.0, "USD"),
            ("Garage\n1850.75 EUR", 1850.75, "EUR"),
            ("Laptop\n$1,299.99", 1299.99, "USD"),
            ("Car deposit\n12,500 GBP", 12500.0, "GBP"),
        ],
    )
    def test_amounts_of_four_or_more_digits(self, text: str, amount: float, currency: str) -> None:
        """Test that long amounts are read whole, with or without grouping commas."""
        result = parse_expense(text)
        assert result.amount == amount
        assert result.currency == currency

    def test_leftover_lines_become_notes(self) -> None:
        """Test leftover lines become notes."""
        result = parse_expense("Corner Cafe\n$3.25\nshared with Sam")
        assert result.notes == "shared with Sam"

    def test_empty(self) -> None:
        """Test empty input gives an empty expense."""
        result = parse_expense("")
        assert result == ExpenseResult()
        assert result.has_minimum_data is False

    def test_from_dict_camel_case(self) -> None:
        """Test from dict camel case."""
        result = ExpenseResult.from_dict(
            {"merchant": "Cafe", "amount": "$4.50", "paymentMethod": "card", "currency": "eur"}
        )
        assert result.amount == 4.5
        assert result.currency == "EUR"
        assert result.payment_method == "card"

    def test_from_dict_currency_defaults_only_with_amount(self) -> None:
        """Test from dict currency defaults only with amount."""
        assert ExpenseResult.from_dict({"amount": 3}).currency == "USD"
        assert ExpenseResult.from_dict({"merchant": "Cafe"}).currency is None


class TestEmail:
    """Tests for email draft parsing."""

    def test_headers_and_body(self) -> None:
        """Test headers and body."""
        result = parse_email(
            "To: bob@example.com\nCc: ann@example.com\nSubject: Lunch plans\n"
            "Hi Bob,\nNoon works.\n\nThanks"
        )
        assert result.to == "bob@example.com"
        assert result.cc == "ann@example.com"
        assert result.bcc is None
        assert result.subject == "Lunch plans"
        assert result.body == "Hi Bob,\nNoon works.\n\nThanks"

    def test_greeting_starts_body(self) -> None:
        """Test greeting starts body."""
        result = parse_email("Dear Sam,\nthanks for the help")
        assert result.subject is None
        assert result.body == "Dear Sam,\nthanks for the help"
        assert result.has_minimum_data is True

    def test_nothing_recognized(self) -> None:
        """Test text without email cues gives no minimum data."""
        result = parse_email("random words")
        assert result == EmailResult()
        assert result.has_minimum_data is False


class TestTodo:
    """Tests for task list parsing."""

    def test_list_shapes(self) -> None:
        """Test checkbox, bullet and numbered items are parsed."""
        result = parse_todos(
            "[ ] buy milk\n[x] call mom\n- fix sink urgent\n"
            "1. pay rent by Friday\nTODO: email Bob due 6/14 !!"
        )
        texts = [item.text for item in result.items]
        assert texts == [
            "buy milk",
            "call mom",
            "fix sink urgent",
            "pay rent by Friday",
            "email Bob due 6/14 !!",
        ]
        assert [item.completed for item in result.items] == [False, True, False, False, False]
        assert result.items[2].priority == Priority.HIGH
        assert result.items[3].due_date == "Friday"
        assert result.items[4].priority == Priority.MEDIUM
        assert result.items[4].due_date == "6/14"

    def test_bare_lines_are_tasks(self) -> None:
        """Test bare lines are tasks."""
        result = parse_todos("milk\neggs\n\n")
        assert [item.text for item in result.items] == ["milk", "eggs"]
        assert all(item.priority == Priority.NORMAL for item in result.items)

    def test_empty(self) -> None:
        """Test empty input gives no todo items."""
        assert parse_todos("   ").has_minimum_data is False

    def test_to_dict_uses_enum_value(self) -> None:
        """Test to dict uses enum value."""
        data = parse_todos("- call mom asap").to_dict()
        assert data == {
            "items": [
                {"text": "call mom asap", "completed": False, "priority": "high", "due_date": None}
            ]
        }

    def test_from_dict_accepts_todos_key(self) -> None:
        """Test from dict accepts todos key."""
        result = TodoResult.from_dict(
            {
                "todos": [
                    "water plants",
                    {"text": "file taxes", "priority": "HIGH", "dueDate": "tomorrow", "completed": "yes"},
                    {"text": "  "},
                ]
            }
        )
        assert len(result.items) == 2
        assert result.items[1].priority == Priority.HIGH
        assert result.items[1].due_date == "tomorrow"
        assert result.items[1].completed is True

    def test_from_dict_unknown_priority(self) -> None:
        """Test from dict unknown priority."""
        result = TodoResult.from_dict({"items": [{"text": "x", "priority": "someday"}]})
        assert result.items[0].priority == Priority.NORMAL

    def test_from_dict_rejects_non_list(self) -> None:
        """Test from dict rejects non list."""
        with pytest.raises(ValueError):
            TodoResult.from_dict({"items": "buy milk"})


class TestMeeting:
    """Tests for meeting note parsing."""

    def test_labeled_sections(self) -> None:
        """Test labeled meeting sections are parsed."""
        result = parse_meeting(MEETING_NOTES)
        assert result.subject == "Weekly sync"
        assert result.attendees == ["Bob", "Alice", "Carol"]
        assert result.agenda == ["budget", "hiring"]
        assert result.action_items == ["Bob to send numbers", "book room"]
        assert result.date == "2024-06-14"
        assert result.time == "10am"
        assert result.location == "Room 4"
        assert result.notes is None

    def test_date_and_time_found_inline(self) -> None:
        """Test date and time found inline."""
        result = parse_meeting("Standup tomorrow at 9:30")
        assert result.subject == "Standup tomorrow at 9:30"
        assert result.date == "tomorrow"
        assert result.time == "9:30"

    def test_split_names_dedupes(self) -> None:
        """Test split names dedupes."""
        assert split_names("Bob, bob & Alice; Dee and Eve") == ["Bob", "Alice", "Dee", "Eve"]

    def test_from_dict_aliases(self) -> None:
        """Test from dict aliases."""
        result = MeetingResult.from_dict({"title": "Sync", "actionItems": [{"task": "ship"}]})
        assert result.subject == "Sync"
        assert result.action_items == ["ship"]
        assert result.has_minimum_data is True


class TestRecipe:
    """Tests for recipe parsing."""

    def test_headed_recipe(self) -> None:
        """Test a recipe with ingredient and direction headers."""
        result = parse_recipe(PANCAKES)
        assert result.title == "Pancakes"
        assert result.servings == "4"
        assert result.prep_time == "10 minutes"
        assert result.ingredients == ["2 cups flour", "1 tsp salt", "2 eggs"]
        assert result.steps == ["Mix dry ingredients", "Fry on a hot griddle"]
        assert result.notes == "Great with syrup"

    def test_step_line_ends_ingredients(self) -> None:
        """Test step line ends ingredients."""
        result = parse_recipe("Ingredients\n2 cups flour\nMix everything together\nBake 20 minutes")
        assert result.ingredients == ["2 cups flour"]
        assert result.steps == ["Mix everything together", "Bake 20 minutes"]
        assert result.cook_time == "20 minutes"

    def test_no_recipe_content(self) -> None:
        """Test no recipe content."""
        assert parse_recipe("just a title").has_minimum_data is False

    def test_from_dict_camel_case(self) -> None:
        """Test from dict camel case."""
        result = RecipeResult.from_dict(
            {"title": "Soup", "ingredients": ["water"], "cookTime": "1 hour", "prepTime": 5}
        )
        assert result.cook_time == "1 hour"
        assert result.prep_time == "5"


class TestEvent:
    """Tests for calendar event parsing."""

    def test_labeled_event(self) -> None:
        """Test labeled event fields are parsed."""
        result = parse_event(
            "Team dinner\nFriday 7pm\nLocation: Luigi's\nOrganizer: Dana\nRSVP dana@example.com"
        )
        assert result.title == "Team dinner"
        assert result.date == "Friday"
        assert result.time == "7pm"
        assert result.location == "Luigi's"
        assert result.organizer == "Dana"
        assert result.contact_info == "dana@example.com"
        assert result.is_recurring is False
        assert result.has_minimum_data is True

    def test_recurring(self) -> None:
        """Test a weekly recurrence is detected."""
        result = parse_event("Yoga class\nevery Tuesday 6:30 pm")
        assert result.is_recurring is True
        assert result.recurrence_pattern == "weekly"
        assert result.date == "Tuesday"

    def test_location_on_line_after_keyword(self) -> None:
        """Test location on line after keyword."""
        result = parse_event("Book club\nmeet at\nthe library\nSunday 2pm")
        assert result.location == "the library"

    def test_title_alone_is_not_enough(self) -> None:
        """Test title alone is not enough."""
        assert parse_event("Party planning").has_minimum_data is False
        assert parse_event("") == EventResult()

    def test_from_dict_camel_case(self) -> None:
        """Test from dict camel case."""
        result = EventResult.from_dict(
            {"title": "Standup", "time": "9am", "isRecurring": "true", "recurrencePattern": "daily"}
        )
        assert result.is_recurring is True
        assert result.recurrence_pattern == "daily"
        assert result.has_minimum_data is True


class TestContact:
    """Tests for business card parsing."""

    def test_business_card(self) -> None:
        """Test every field of a business card."""
        result = parse_contact(BUSINESS_CARD)
        assert result.first_name == "Jane"
        assert result.last_name == "Smith"
        assert result.display_name == "Jane Smith"
        assert result.job_title == "Senior Engineer"
        assert result.company == "Acme Technologies Inc"
        assert result.phone == "555-123-4567"
        assert result.email == "jane@acme.com"
        assert result.website == "www.acme.com"
        assert result.street_address == "123 Main Street"
        assert (result.city, result.state, result.zip_code) == ("Springfield", "IL", "62704")
        assert result.notes is None

    def test_phone_alone_is_enough(self) -> None:
        """Test phone alone is enough."""
        result = parse_contact("call 555-987-6543")
        assert result.phone == "555-987-6543"
        assert result.first_name is None
        assert result.has_minimum_data is True

    def test_from_dict_camel_case(self) -> None:
        """Test from dict camel case."""
        result = ContactResult.from_dict({"firstName": "Ann", "lastName": "Lee", "zipCode": 12345})
        assert result.display_name == "Ann Lee"
        assert result.zip_code == "12345"


class TestGeneral:
    """Tests for free-form notes."""

    def test_title_body_and_tags(self) -> None:
        """Test title body and tags."""
        text = "Garden ideas #home\nplant tomatoes"
        result = parse_general(text)
        assert result.title == "Garden ideas #home"
        assert result.body == text
        assert result.tags == ["home"]

    def test_long_first_line_truncated(self) -> None:
        """Test long first line truncated."""
        result = parse_general("word " * 40)
        assert result.title is not None
        assert len(result.title) <= 80

    def test_empty(self) -> None:
        """Test empty input gives an empty general note."""
        assert parse_general("  \n ") == GeneralResult()
        assert GeneralResult().has_minimum_data is False

    def test_from_dict_normalizes_tags(self) -> None:
        """Test from dict normalizes tags."""
        result = GeneralResult.from_dict({"body": "x", "tags": ["#Work", "home"]})
        assert result.tags == ["work", "home"]
