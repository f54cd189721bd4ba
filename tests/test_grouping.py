"""Keyword group labeling: partition validation and the label/save-back flow."""

import io

import numpy as np
import pytest
from rich.console import Console

from ts_feature_tools.errors import (
    AmbiguousRecordError,
    EmptyGroupError,
    GroupingError,
    UnassignedRecordError,
)
from ts_feature_tools.grouping import (
    KeywordGroup,
    Record,
    as_keyword_groups,
    label_groups,
    membership_matrix,
    parse_group_tokens,
    partition,
    unique_keywords,
)


def rec(i, *keywords):
    return Record(id=i, name=f'ts_{i}', keywords=frozenset(keywords))


def quiet_console():
    buf = io.StringIO()
    return Console(file=buf, width=200), buf


class FakeStore:
    path = 'memory://timeseries'

    def __init__(self, records):
        self.records = records
        self.writes = []

    def load(self):
        return list(self.records)

    def write_groups(self, group_names, labels):
        self.writes.append((list(group_names), list(labels)))


class TestPartition:

    def test_disjoint_groups(self):
        records = [rec(1, 'disease'), rec(2, 'healthy')]
        assert partition(records, ['disease', 'healthy']) == [1, 2]

    def test_labels_are_one_based_and_follow_record_order(self):
        records = [rec(1, 'b'), rec(2, 'a'), rec(3, 'b', 'x'), rec(4, 'a')]
        assert partition(records, ['a', 'b']) == [2, 1, 2, 1]

    def test_ambiguous_record(self):
        records = [rec(1, 'disease'), rec(2, 'healthy'), rec(3, 'disease', 'healthy')]
        with pytest.raises(AmbiguousRecordError) as exc:
            partition(records, ['disease', 'healthy'])
        assert exc.value.records == ['ts_3']

    def test_empty_group(self):
        records = [rec(1, 'disease'), rec(2, 'disease')]
        with pytest.raises(EmptyGroupError) as exc:
            partition(records, ['disease', 'cancer'])
        assert exc.value.groups == ['cancer']
        assert "'cancer'" in str(exc.value)

    def test_unassigned_record(self):
        records = [rec(1, 'disease'), rec(2, 'healthy'), rec(3, 'other')]
        with pytest.raises(UnassignedRecordError) as exc:
            partition(records, ['disease', 'healthy'])
        assert exc.value.records == ['ts_3']

    def test_empty_group_checked_before_unassigned(self):
        records = [rec(1, 'disease'), rec(2, 'other')]
        with pytest.raises(EmptyGroupError):
            partition(records, ['disease', 'cancer'])

    def test_unassigned_checked_before_ambiguous(self):
        records = [rec(1, 'a', 'b'), rec(2, 'c')]
        with pytest.raises(UnassignedRecordError):
            partition(records, ['a', 'b'])

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            partition([rec(1, 'a')], ['b'])
        assert issubclass(AmbiguousRecordError, GroupingError)

    def test_match_is_case_sensitive(self):
        records = [rec(1, 'Disease'), rec(2, 'healthy')]
        with pytest.raises(EmptyGroupError):
            partition(records, ['disease', 'healthy'])

    def test_multi_keyword_group(self):
        records = [rec(1, 'flu'), rec(2, 'cold'), rec(3, 'healthy')]
        groups = [KeywordGroup('sick', ('flu', 'cold')), 'healthy']
        assert partition(records, groups) == [1, 1, 2]

    def test_single_string_is_one_group(self):
        records = [rec(1, 'a', 'z'), rec(2, 'a')]
        assert partition(records, 'a') == [1, 1]

    def test_no_records_no_groups(self):
        assert partition([], []) == []

    def test_no_records_with_groups_is_empty_group(self):
        with pytest.raises(EmptyGroupError):
            partition([], ['a'])

    def test_repeatable(self):
        records = [rec(1, 'x'), rec(2, 'y'), rec(3, 'x')]
        assert partition(records, ['x', 'y']) == partition(records, ['x', 'y'])

    def test_every_record_assigned_exactly_once(self):
        records = [rec(i, 'even' if i % 2 == 0 else 'odd', f'n{i}') for i in range(20)]
        groups = ['even', 'odd']
        labels = partition(records, groups)
        m = membership_matrix(records, as_keyword_groups(groups))
        assert len(labels) == len(records)
        assert np.all(m.sum(axis=1) == 1)
        assert set(labels) == {1, 2}


class TestGroupHelpers:

    def test_as_keyword_groups_forms(self):
        groups = as_keyword_groups([['flu', 'cold'], 'healthy', KeywordGroup('g', ('x',))])
        assert [g.name for g in groups] == ['flu,cold', 'healthy', 'g']
        assert groups[0].keywords == ('flu', 'cold')

    def test_as_keyword_groups_empty(self):
        assert as_keyword_groups(None) == []
        assert as_keyword_groups([]) == []

    def test_keyword_group_needs_keywords(self):
        with pytest.raises(ValueError):
            KeywordGroup('nothing', ())

    def test_parse_group_tokens(self):
        assert parse_group_tokens(['disease+sick', 'healthy']) == [['disease', 'sick'], ['healthy']]
        assert parse_group_tokens(['a++b']) == [['a', 'b']]
        assert parse_group_tokens([]) == []

    def test_parse_group_tokens_rejects_empty_group(self):
        with pytest.raises(ValueError, match=r"'\+\+'"):
            parse_group_tokens(['healthy', '++'])

    def test_unique_keywords_sorted(self):
        records = [rec(1, 'b', 'a'), rec(2, 'c', 'a'), rec(3)]
        assert unique_keywords(records) == ['a', 'b', 'c']

    def test_membership_matrix_shape(self):
        records = [rec(1, 'a'), rec(2, 'b'), rec(3, 'a', 'b')]
        m = membership_matrix(records, as_keyword_groups(['a', 'b']))
        assert m.shape == (3, 2)
        assert m.tolist() == [[True, False], [False, True], [True, True]]


class TestLabelGroups:

    def test_saves_back_by_default(self):
        store = FakeStore([rec(1, 'disease'), rec(2, 'healthy'), rec(3, 'disease')])
        console, buf = quiet_console()
        labels = label_groups(store, ['disease', 'healthy'], console=console)
        assert labels == [1, 2, 1]
        assert store.writes == [(['disease', 'healthy'], [1, 2, 1])]
        assert 'disease -- 2 matches (/3)' in buf.getvalue()

    def test_no_save(self):
        store = FakeStore([rec(1, 'disease'), rec(2, 'healthy')])
        console, _ = quiet_console()
        assert label_groups(store, ['disease', 'healthy'], save_back=False, console=console) == [1, 2]
        assert store.writes == []

    def test_failed_validation_writes_nothing(self):
        store = FakeStore([rec(1, 'disease')])
        console, buf = quiet_console()
        with pytest.raises(EmptyGroupError):
            label_groups(store, ['disease', 'cancer'], console=console)
        assert store.writes == []
        assert "No matches found for 'cancer'" in buf.getvalue()

    def test_unique_keywords_when_confirmed(self):
        store = FakeStore([rec(1, 'disease'), rec(2, 'healthy')])
        console, _ = quiet_console()
        questions = []

        def confirm(q):
            questions.append(q)
            return True

        labels = label_groups(store, confirm=confirm, console=console)
        assert labels == [1, 2]
        assert store.writes == [(['disease', 'healthy'], [1, 2])]
        assert '2 keywords' in questions[0]

    def test_declined_confirmation_is_a_no_op(self):
        store = FakeStore([rec(1, 'disease'), rec(2, 'healthy')])
        console, _ = quiet_console()
        assert label_groups(store, confirm=lambda q: False, console=console) is None
        assert store.writes == []

    def test_no_confirmation_callback_is_a_no_op(self):
        store = FakeStore([rec(1, 'disease')])
        console, _ = quiet_console()
        assert label_groups(store, console=console) is None
        assert store.writes == []

    def test_empty_store_never_asks(self):
        store = FakeStore([])
        console, buf = quiet_console()
        questions = []

        def confirm(q):
            questions.append(q)
            return True

        assert label_groups(store, confirm=confirm, console=console) is None
        assert questions == []
        assert store.writes == []
        assert 'No keywords found' in buf.getvalue()

    def test_store_without_keywords_never_asks(self):
        store = FakeStore([rec(1), rec(2)])
        console, _ = quiet_console()
        assert label_groups(store, confirm=lambda q: True, console=console) is None
        assert store.writes == []
