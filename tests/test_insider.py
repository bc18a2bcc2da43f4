from unittest.mock import MagicMock

import pytest

from stockgrabber.insider import (
    print_insider_activity,
    serialize_insider_activity,
    serialize_insider_movement,
)


@pytest.fixture
def raw_movement():
    return {
        "id": 981,
        "name": "PT Dwimuria Investama Andalan",
        "symbol": "BBCA",
        "date": "15 Mar 24",
        "previous": {"value": "67,729,950,000", "percentage": "54.94"},
        "current": {"value": "67,730,950,000", "percentage": "54.95"},
        "changes": {
            "value": "+1,000,000",
            "percentage": "+0.01",
            "formatted_value": "+1.00M",
        },
        "nationality": "NATIONALITY_TYPE_LOCAL",
        "action_type": "ACTION_TYPE_BUY",
        "data_source": {"label": "KSEI", "type": "SOURCE_TYPE_KSEI"},
        "broker_detail": {"code": "YP", "group": "BROKER_GROUP_FOREIGN"},
        "badges": ["Pengendali"],
    }


def test_serialize_insider_movement(raw_movement):
    """Test labels and nested values are flattened."""
    mv = serialize_insider_movement(raw_movement)
    assert mv.id == "981"
    assert mv.symbol == "BBCA"
    assert mv.previous_percentage == "54.94"
    assert mv.current_value == "67,730,950,000"
    assert mv.change_formatted == "+1.00M"
    assert mv.nationality == "Local"
    assert mv.action == "Buy"
    assert mv.source == "KSEI"
    assert mv.broker_code == "YP"
    assert mv.broker_group == "Foreign"
    assert mv.badges == ("Pengendali",)


def test_serialize_insider_movement_unknown_labels():
    """Test unknown or missing codes fall back to placeholder labels."""
    mv = serialize_insider_movement(
        {"action_type": "ACTION_TYPE_OTHER", "broker_detail": {"group": "BROKER_GROUP_GOVERNMENT"}}
    )
    assert mv.action == "Unknown"
    assert mv.nationality == "-"
    assert mv.broker_group == "Gov"
    assert mv.previous_value == ""
    assert mv.badges == ()


def test_serialize_insider_activity(raw_movement):
    """Test movements keep order and the paging flag is read."""
    sell = dict(raw_movement, id=982, action_type="ACTION_TYPE_SELL")
    activity = serialize_insider_activity(
        {"data": {"is_more": True, "movement": [raw_movement, sell]}}
    )
    assert [m.action for m in activity.movements] == ["Buy", "Sell"]
    assert activity.is_more is True


@pytest.mark.parametrize("raw", [{}, {"data": None}, {"data": {"movement": None}}])
def test_serialize_insider_activity_empty(raw):
    """Test absent movements yield an empty page."""
    activity = serialize_insider_activity(raw)
    assert activity.movements == ()
    assert activity.is_more is False


def test_print_insider_activity(raw_movement, capsys):
    """Test filters are forwarded and rows printed."""
    client = MagicMock()
    client.get_insider_activity.return_value = {
        "data": {"is_more": True, "movement": [raw_movement]}
    }

    print_insider_activity(
        client,
        start_date="2024-03-01",
        end_date="2024-03-31",
        action_type="ACTION_TYPE_BUY",
        verbose=True,
    )

    client.get_insider_activity.assert_called_once_with(
        start_date="2024-03-01",
        end_date="2024-03-31",
        page=1,
        limit=20,
        action_type="ACTION_TYPE_BUY",
        source_type="SOURCE_TYPE_UNSPECIFIED",
    )
    out = capsys.readouterr().out
    assert "BBCA" in out
    assert "+1.00M" in out
    assert "--page 2" in out


def test_print_insider_activity_empty(capsys):
    """Test message when there are no movements."""
    client = MagicMock()
    client.get_insider_activity.return_value = {"data": {"movement": []}}

    print_insider_activity(client)

    assert "No insider activity found." in capsys.readouterr().out
