#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "pytest>=8.0.0",
#     "pyyaml>=6.0.0",
# ]
# ///
"""
Tests for recap_combine.py

Covers:
- Per-type section combination (simple, day_sorted, cal_events, tasks, habits)
- Section type resolution (missing entries, unknown names, aliases)
- Full overview generation with the shipped recap_config.yaml

Run with: uv run pytest tests/test_combine.py -v
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path so we can import recap_combine
sys.path.insert(0, str(Path(__file__).parent.parent))

from recap_combine import (
    CAL_EVENTS,
    DAY_SORTED,
    SIMPLE,
    combine_section,
    generate_overview,
    section_type,
)
from recap_config import load_config
from recap_sections import decode_sections, extract_section_names


@pytest.fixture
def config():
    """Minimal combination config covering every section type."""
    return {
        'section_order': ['TRIPS', 'EVENTS', 'CAL EVENTS', 'TASKS', 'HABITS'],
        'section_types': {
            'TRIPS': 'simple',
            'EVENTS': 'day_sorted',
            'CAL EVENTS': 'cal_events',
            'TASKS': 'tasks',
            'HABITS': 'habits',
        },
        'item_styles': {
            'CAL EVENTS': 'commas',
        },
        'evaluation_rules': {
            'cal_events': {
                'default': 'Some',
                'ranges': [
                    {'min': 0, 'max': 10, 'label': 'Some'},
                    {'min': 10, 'max': float('inf'), 'label': 'Lots'},
                ],
            },
            'tasks': {
                'default': 'Some',
                'ranges': [
                    {'min': 0, 'max': 5, 'label': 'Some'},
                    {'min': 5, 'max': float('inf'), 'label': 'Lots'},
                ],
            },
            'habits': {
                'scoring': {'good': 1, 'bad': -1, 'notGreat': -0.5},
                'overall_evaluation': [{'min': 1, 'max': 99, 'label': 'Great habits'}],
            },
        },
        'formatting': {
            'section_header': '===== {title} =====',
            'section_separator': '\n',
            'item_separator': '\n',
            'category_header': '{evaluation} {category_lower}',
        },
    }


@pytest.fixture
def shipped_config():
    """The recap block of the real recap_config.yaml."""
    return load_config(str(Path(__file__).parent.parent / 'recap_config.yaml'))['recap']


# ============================================================================
# section_type
# ============================================================================

class TestSectionType:
    """Tests for section_type()."""

    def test_configured_type(self, config):
        assert section_type('EVENTS', config) == DAY_SORTED

    def test_missing_entry_is_none(self, config):
        assert section_type('ROCKS', config) is None

    def test_unknown_type_falls_back_to_simple(self, config):
        config['section_types']['ROCKS'] = 'mystery'

        assert section_type('ROCKS', config) == SIMPLE

    def test_legacy_aliases(self, config):
        config['section_types']['EVENTS'] = 'simple+daySort'
        config['section_types']['CAL EVENTS'] = 'calEvents'

        assert section_type('EVENTS', config) == DAY_SORTED
        assert section_type('CAL EVENTS', config) == CAL_EVENTS


# ============================================================================
# simple / day_sorted
# ============================================================================

class TestSimpleAndDaySorted:
    """Tests for the simple and day_sorted combinations."""

    def test_events_are_sorted_by_day(self, config):
        result = combine_section('EVENTS', "Mon call with Alice", "Wed dinner with Bob", config)

        assert result == "Mon call with Alice\nWed dinner with Bob"

    def test_bad_side_day_comes_first_when_earlier(self, config):
        result = combine_section('EVENTS', "Fri movie", "Tue dentist", config)

        assert result == "Tue dentist\nFri movie"

    def test_day_sort_is_stable_across_sides(self, config):
        """Same-day lines keep good-then-bad order."""
        result = combine_section('EVENTS', "Mon good thing", "Mon bad thing", config)

        assert result == "Mon good thing\nMon bad thing"

    def test_simple_joins_good_then_bad(self, config):
        assert combine_section('TRIPS', "Beach", "Airport delay", config) == "Beach\nAirport delay"

    @pytest.mark.parametrize('good, bad, expected', [
        ("  Beach weekend \n", "", "Beach weekend"),
        ("", "\n Airport delay  ", "Airport delay"),
        ("", "", ""),
    ])
    def test_simple_one_sided_is_trimmed_side(self, config, good, bad, expected):
        assert combine_section('TRIPS', good, bad, config) == expected

    def test_item_separator_from_config(self, config):
        config['formatting']['item_separator'] = ' | '

        assert combine_section('TRIPS', "a", "b", config) == "a | b"

    def test_section_without_type_is_skipped(self, config):
        assert combine_section('ROCKS', "Ship v2", "Taxes", config) == ''


# ============================================================================
# cal_events / tasks
# ============================================================================

class TestCategorySections:
    """Tests for the cal_events and tasks combinations."""

    def test_cal_events_merge_hours_and_sort_items(self, config):
        good = "✅ Social time (2 events, 4 hours):\nSat board games, Tue dinner with Sam"
        bad = "❌ Social time (1 events, 7 hours):\nMon party\n\n❌ Calls time (1 events, 1 hours):\nWed call with Mom"

        result = combine_section('CAL EVENTS', good, bad, config)

        assert result == (
            "Lots social time (11 hours)\n"
            "Mon party\n"
            "Sat board games, Tue dinner with Sam\n"
            "\n"
            "Some calls time (1 hours)\n"
            "Wed call with Mom"
        )

    def test_fractional_hours(self, config):
        good = "Social time (1 events, 1.5 hours):\nTue dinner"
        bad = "Social time (1 events, 2 hours):\nWed drinks"

        result = combine_section('CAL EVENTS', good, bad, config)

        assert result.splitlines()[0] == "Some social time (3.5 hours)"

    def test_event_title_with_comma_stays_whole(self, config):
        """A comma inside an event title must not split the event."""
        good = "✅ Social time (1 events, 3 hours):\nTue dinner with Sam, Alex and Jo"
        bad = "❌ Social time (1 events, 1 hours):\nMon party"

        result = combine_section('CAL EVENTS', good, bad, config)

        assert result == "Some social time (4 hours)\nMon party\nTue dinner with Sam, Alex and Jo"

    def test_summed_hours_have_no_float_noise(self, config):
        good = "Social time (1 events, 1.1 hours):\nTue dinner"
        bad = "Social time (1 events, 2.2 hours):\nWed drinks"

        result = combine_section('CAL EVENTS', good, bad, config)

        assert result.splitlines()[0] == "Some social time (3.3 hours)"

    def test_tasks_merge_counts_in_order(self, config):
        good = "Personal Tasks (2)\n• Clean\n• Cook"
        bad = "Personal Tasks (1)\n• Shop"

        result = combine_section('TASKS', good, bad, config)

        assert result == "Some personal tasks (3)\n• Clean\n• Cook\n• Shop"

    def test_tasks_label_changes_at_boundary(self, config):
        good = "Home (3)\n• a\n• b\n• c"
        bad = "Home (2)\n• d\n• e"

        result = combine_section('TASKS', good, bad, config)

        assert result.splitlines()[0] == "Lots home (5)"

    def test_tasks_with_comma_style(self, config):
        config['item_styles']['TASKS'] = 'commas'

        result = combine_section('TASKS', "✅ Personal Tasks (2)\nClean, Cook", "", config)

        assert result == "Some personal tasks (2)\nClean, Cook"

    def test_no_categories_is_empty(self, config):
        assert combine_section('TASKS', "no headers here", "", config) == ''


# ============================================================================
# habits
# ============================================================================

class TestHabits:
    """Tests for the habits combination."""

    def test_habit_label_and_lines(self, config):
        result = combine_section('HABITS', "✅ Workout\n✅ Reading", "❌ Drinking", config)

        assert result == "Great habits\n✅ Workout\n✅ Reading\n❌ Drinking"

    def test_no_habit_lines(self, config):
        assert combine_section('HABITS', "", "  ", config) == ''


# ============================================================================
# generate_overview
# ============================================================================

class TestGenerateOverview:
    """Tests for generate_overview()."""

    def test_sections_follow_configured_order(self, config):
        good = "===== TASKS =====\nHome (1)\n• Fix sink\n===== EVENTS =====\nWed dinner with Bob"
        bad = "===== EVENTS =====\nMon call with Alice"

        result = generate_overview(good, bad, config)

        assert extract_section_names(result) == ['EVENTS', 'TASKS']
        assert decode_sections(result) == {
            'EVENTS': "Mon call with Alice\nWed dinner with Bob",
            'TASKS': "Some home (1)\n• Fix sink",
        }

    def test_sections_missing_from_both_are_omitted(self, config):
        result = generate_overview("===== TRIPS =====\nBeach", "", config)

        assert result == "===== TRIPS =====\nBeach"

    def test_sections_not_in_order_are_dropped(self, config):
        result = generate_overview("===== ROCKS =====\nShip v2\n===== TRIPS =====\nBeach", "", config)

        assert extract_section_names(result) == ['TRIPS']

    def test_empty_documents(self, config):
        assert generate_overview("", "", config) == ''

    def test_section_headers_are_matched_case_insensitively(self, config):
        result = generate_overview("===== trips =====\nBeach", "===== Trips =====\nRain", config)

        assert result == "===== TRIPS =====\nBeach\nRain"

    def test_shipped_config_end_to_end(self, shipped_config):
        good = (
            "===== EVENTS =====\nWed dinner with Bob\n"
            "===== ROCKS =====\nmade progress on Garden bed\n"
            "===== CAL EVENTS =====\n✅ Social time (2 events, 12 hours):\nSat games, Tue dinner\n"
            "===== TASKS =====\n✅ Personal Tasks (2)\nClean, Cook\n"
            "===== HABITS =====\nGood sleep"
        )
        bad = (
            "===== EVENTS =====\nMon call with Alice\n"
            "===== ROCKS =====\nTaxes\n"
            "===== HABITS =====\nBad snacking\nBad screen time"
        )

        sections = decode_sections(generate_overview(good, bad, shipped_config))

        assert list(sections) == ['EVENTS', 'ROCKS', 'CAL EVENTS', 'TASKS', 'HABITS']
        assert sections['EVENTS'] == "Mon call with Alice\nWed dinner with Bob"
        assert sections['ROCKS'] == "made progress on Garden bed\nTaxes"
        assert sections['CAL EVENTS'] == "Lots social time (12 hours)\nSat games, Tue dinner"
        assert sections['TASKS'] == "Some personal tasks (2)\nClean, Cook"
        assert sections['HABITS'] == "Ok healthy habits this week\nGood sleep\nBad snacking\nBad screen time"
