"""Tests for bulk editing of task lists."""

from datetime import date, datetime, timezone

import pytest

from todokit.engine.edit import (
    Action,
    Conf,
    DateTagChange,
    ListTagChange,
    add,
    clone_tasks,
    done,
    edit,
    remove,
    start,
    stop,
    undone,
)
from todokit.models.completion import CompletionConfig, CompletionDateMode, CompletionMode
from todokit.models.constants import INVALID_ID, NO_PRIORITY
from todokit.models.recurrence import Recurrence
from todokit.models.task import Task

TAG_LINE = "item:ball take to who:me game game:there"


def _tasks(lines, today):
    return [Task.parse(line, today) for line in lines]


class TestAddCloneRemove:
    """List level operations."""

    def test_clone(self, family_tasks):
        """Clones are equal copies that do not share state."""
        clones = clone_tasks(family_tasks, [2, 4])
        assert clones == [family_tasks[2], family_tasks[4]]
        clones[0].update_tag_with_value("who", "me")
        assert "who" not in family_tasks[2].tags

    def test_clone_skips_invalid_ids(self, family_tasks):
        assert clone_tasks(family_tasks, [15, 4]) == [family_tasks[4]]

    def test_add(self, family_tasks, today):
        idx = add(family_tasks, Conf(subject="new task"), today)
        assert idx == 6
        assert family_tasks[6].subject == "new task"
        assert family_tasks[6].create_date is None

    def test_add_with_create_date(self, today):
        tasks = []
        add(tasks, Conf(subject="new task +home", auto_create_date=True), today)
        assert tasks[0].create_date == today
        assert tasks[0].projects == ["home"]

    def test_add_from_environment(self, monkeypatch, today):
        """TODOKIT_AUTO_CREATE_DATE supplies the default."""
        monkeypatch.setenv("TODOKIT_AUTO_CREATE_DATE", "true")
        tasks = []
        add(tasks, Conf(subject="new task"), today)
        assert tasks[0].to_line() == "2020-02-02 new task"

    @pytest.mark.parametrize("subject", [None, "", "   "])
    def test_add_empty(self, family_tasks, today, subject):
        assert add(family_tasks, Conf(subject=subject), today) == INVALID_ID
        assert len(family_tasks) == 6

    def test_add_finished_with_create_date(self, today):
        """A finished task stamped with a creation date also gets a finish date."""
        tasks = []
        add(tasks, Conf(subject="x done thing", auto_create_date=True), today)
        assert tasks[0].to_line() == "x 2020-02-02 2020-02-02 done thing"
        assert Task.parse(tasks[0].to_line(), today) == tasks[0]

    def test_remove(self, family_tasks):
        assert remove(family_tasks, [1, 20]) == [True, False]
        assert len(family_tasks) == 5
        assert family_tasks[1].subject.startswith("repair family car")

    def test_remove_all(self, family_tasks):
        assert remove(family_tasks, None) == [True] * 6
        assert family_tasks == []


class TestDoneUndone:
    """Completion of lists and recurring tasks."""

    def test_done(self, family_tasks, today):
        due = family_tasks[3].due_date
        changed = done(family_tasks, [0, 1, 3, 4, 10], today=today)
        assert changed == [True, False, True, True, False]
        assert len(family_tasks) == 7
        assert all(family_tasks[idx].finished for idx in (0, 1, 3, 4))
        assert family_tasks[3].due_date == due

        spawned = family_tasks[6]
        assert not spawned.finished
        assert spawned.due_date == date(2020, 2, 9)
        assert spawned.subject == "Kid's art school lesson +Family @Kids due:2020-02-09 rec:1w"

    def test_undone(self, family_tasks):
        assert undone(family_tasks, [0, 2, 3]) == [False, False, False]
        assert undone(family_tasks, [0, 1, 3, 4, 10]) == [False, True, False, False, False]
        assert not family_tasks[1].finished
        assert family_tasks[1].finish_date is None

    def test_strict_recurrence_appends_next(self, today):
        tasks = _tasks(["test rec:+1m due:2020-03-01"], today)
        assert done(tasks, [0], today=today) == [True]
        assert [t.to_line() for t in tasks] == [
            "x test rec:+1m due:2020-03-01",
            "test rec:+1m due:2020-04-01",
        ]

    def test_recurrence_from_today(self, today):
        tasks = _tasks(["test rec:1m due:2020-03-01"], today)
        done(tasks, [0], today=today)
        assert tasks[1].to_line() == "test rec:1m due:2020-03-02"

    def test_next_occurrence_gets_new_create_date(self, today):
        tasks = _tasks(["2020-01-01 water plants rec:1w t:2020-01-30"], today)
        done(tasks, [0], today=today)
        assert tasks[0].to_line() == "x 2020-02-02 2020-01-01 water plants rec:1w t:2020-01-30"
        assert tasks[1].to_line() == "2020-02-02 water plants rec:1w t:2020-02-09"

    @pytest.mark.parametrize(
        "line,expected",
        [
            ("test rec:1d due:2020-02-01 tmr:off one", "test rec:1d one"),
            ("test rec:1d due:2020-02-01 two spent:23", "test rec:1d two"),
            ("test rec:1d due:2020-02-01 spent:23 three tmr:on four", "test rec:1d three four"),
        ],
    )
    def test_next_occurrence_drops_timer(self, today, line, expected):
        tasks = _tasks([line], today)
        config = CompletionConfig(date_mode=CompletionDateMode.ALWAYS_SET)
        done(tasks, [0], config=config, today=today)
        assert len(tasks) == 2
        spawned = tasks[1]
        assert not spawned.finished
        spawned.update_tag("due:", today)
        assert spawned.to_line() == expected

    def test_until_stops_recurrence(self, today):
        tasks = _tasks(["pay rent rec:1m due:2020-02-01 until:2020-02-20"], today)
        assert done(tasks, [0], today=today) == [True]
        assert len(tasks) == 1

    def test_until_in_range(self, today):
        tasks = _tasks(["pay rent rec:1w due:2020-02-01 until:2020-02-20"], today)
        done(tasks, [0], today=today)
        assert tasks[1].due_date == date(2020, 2, 9)

    @pytest.mark.parametrize(
        "line,count",
        [
            ("pay rent rec:1w due:2020-02-01 until:2020-02-09", 2),
            ("pay rent rec:1w due:2020-02-01 until:2020-02-08", 1),
            ("water plants rec:1w t:2020-02-01 until:2020-02-09", 2),
            ("water plants rec:1w t:2020-02-01 until:2020-02-08", 1),
        ],
    )
    def test_until_boundary(self, today, line, count):
        """The next occurrence is still added when its date falls on the until date."""
        tasks = _tasks([line], today)
        assert done(tasks, [0], today=today) == [True]
        assert len(tasks) == count

    def test_done_stops_timer(self, today):
        started = datetime(2020, 2, 2, 10, 0, tzinfo=timezone.utc)
        tasks = _tasks([f"write report tmr:{int(started.timestamp())}"], today)
        done(tasks, [0], today=today, now=datetime(2020, 2, 2, 10, 30, tzinfo=timezone.utc))
        assert tasks[0].tags["tmr"] == "off"
        assert tasks[0].tags["spent"] == "1800"

    def test_done_uses_configured_mode(self, monkeypatch, today):
        monkeypatch.setenv("TODOKIT_COMPLETION_MODE", "priority_to_tag")
        monkeypatch.setenv("TODOKIT_COMPLETION_DATE_MODE", "always_set")
        tasks = _tasks(["(B) testb"], today)
        done(tasks, [0], today=today)
        assert tasks[0].to_line() == "x 2020-02-02 testb pri:B"
        undone(tasks, [0])
        assert tasks[0].to_line() == "(B) testb"

    def test_undone_with_mode(self, today):
        tasks = _tasks(["x 2020-02-02 (B) testb"], today)
        assert undone(tasks, [0], CompletionMode.MOVE_PRIORITY) == [True]
        assert tasks[0].to_line() == "(B) testb"


class TestEditPriority:

    def test_set(self, family_tasks):
        conf = Conf(priority=3, priority_act=Action.SET)
        assert edit(family_tasks, [0, 2], conf) == [True, True]
        assert family_tasks[0].priority == 3
        assert edit(family_tasks, [0], conf) == [False]

    def test_delete(self, family_tasks):
        conf = Conf(priority_act=Action.DELETE)
        assert edit(family_tasks, [0, 3], conf) == [False, True]
        assert family_tasks[3].priority == NO_PRIORITY

    def test_increase(self, family_tasks):
        conf = Conf(priority_act=Action.INCREASE)
        assert edit(family_tasks, [0, 2, 3], conf) == [True, True, False]
        assert family_tasks[0].priority == 25
        assert family_tasks[2].priority == 0

    def test_decrease(self, family_tasks):
        conf = Conf(priority_act=Action.DECREASE)
        assert edit(family_tasks, [0, 2], conf) == [False, True]
        assert family_tasks[2].priority == 2
        family_tasks[0].priority = 25
        assert edit(family_tasks, [0], conf) == [True]
        assert family_tasks[0].priority == NO_PRIORITY


class TestEditDates:

    @pytest.mark.parametrize(
        "line,conf,expected",
        [
            (
                "feed cat thr:2020-10-10",
                Conf(due=DateTagChange(action=Action.SET, value="thr+1d")),
                "feed cat thr:2020-10-10 due:2020-10-11",
            ),
            (
                "feed cat due:2020-10-09 thr:2020-10-10",
                Conf(due=DateTagChange(action=Action.SET, value="thr+1d")),
                "feed cat due:2020-10-11 thr:2020-10-10",
            ),
            (
                "feed cat due:2020-10-09 thr:2020-10-10",
                Conf(due=DateTagChange(action=Action.SET, value="due+1d")),
                "feed cat due:2020-10-10 thr:2020-10-10",
            ),
            (
                "feed cat due:2020-10-09 thr:2020-10-10",
                Conf(due=DateTagChange(action=Action.SET, value="due+1m-1d")),
                "feed cat due:2020-11-08 thr:2020-10-10",
            ),
            (
                "feed cat",
                Conf(thr=DateTagChange(action=Action.SET, value=date(2020, 12, 1))),
                "feed cat t:2020-12-01",
            ),
            (
                "feed cat due:2020-10-09 t:2020-10-01",
                Conf(
                    due=DateTagChange(action=Action.DELETE),
                    thr=DateTagChange(action=Action.SET, value="tomorrow"),
                ),
                "feed cat t:2020-10-13",
            ),
        ],
    )
    def test_set_and_delete(self, line, conf, expected):
        today = date(2020, 10, 12)
        tasks = _tasks([line], today)
        assert edit(tasks, [0], conf, today) == [True]
        assert tasks[0].to_line() == expected

    def test_bad_expression_leaves_task_alone(self, today):
        tasks = _tasks(["feed cat", "feed dog due:2020-02-10"], today)
        conf = Conf(due=DateTagChange(action=Action.SET, value="due+1d"), priority=0, priority_act=Action.SET)
        assert edit(tasks, None, conf, today) == [False, True]
        assert tasks[0].to_line() == "feed cat"
        assert tasks[1].to_line() == "(A) feed dog due:2020-02-11"

    def test_soon_days(self, today):
        tasks = _tasks(["feed cat"], today)
        conf = Conf(due=DateTagChange(action=Action.SET, value="soon"), soon_days=2)
        edit(tasks, [0], conf, today)
        assert tasks[0].due_date == date(2020, 2, 4)


class TestEditRecurrence:

    def test_set(self, today):
        tasks = _tasks(["x pay rent due:2020-02-01", "pay bills rec:1m"], today)
        conf = Conf(recurrence="+1m", recurrence_act=Action.SET)
        assert edit(tasks, None, conf, today) == [True, True]
        assert tasks[0].to_line() == "pay rent due:2020-02-01 rec:+1m"
        assert tasks[1].recurrence == Recurrence.parse("+1m")

    def test_set_restores_moved_priority(self, monkeypatch, today):
        """Reopening a finished task uses the configured completion mode."""
        monkeypatch.setenv("TODOKIT_COMPLETION_MODE", "priority_to_tag")
        tasks = _tasks(["x pay rent pri:B due:2020-02-01"], today)
        conf = Conf(recurrence="+1m", recurrence_act=Action.SET)
        assert edit(tasks, [0], conf, today) == [True]
        assert tasks[0].to_line() == "(B) pay rent due:2020-02-01 rec:+1m"

    def test_delete(self, family_tasks, today):
        conf = Conf(recurrence_act=Action.DELETE)
        assert edit(family_tasks, [2, 3], conf, today) == [False, True]
        assert family_tasks[3].recurrence is None
        assert "rec:" not in family_tasks[3].subject


class TestEditLists:

    @pytest.mark.parametrize(
        "act,values,expected",
        [
            (Action.DELETE, ["about", "tags"], "test some #hashtags"),
            (Action.SET, ["about", "tags"], "test #about some #hashtags #tags"),
            (Action.REPLACE, ["about:this", "hashtags:tags", "no:yes"], "test #this some #tags"),
        ],
    )
    def test_hashtags(self, today, act, values, expected):
        tasks = _tasks(["test #about some #hashtags"], today)
        conf = Conf(hashtags=ListTagChange(action=act, value=values))
        assert edit(tasks, [0], conf, today) == [True]
        assert tasks[0].subject == expected

    def test_replace_same_hashtag(self, today):
        tasks = _tasks(["test #about some #hashtags"], today)
        conf = Conf(hashtags=ListTagChange(action=Action.REPLACE, value=["about:about"]))
        assert edit(tasks, [0], conf, today) == [False]

    def test_projects(self, family_tasks, today):
        conf = Conf(projects=ListTagChange(action=Action.REPLACE, value=["+family+home"]))
        changed = edit(family_tasks, None, conf, today)
        assert changed == [True, False, False, True, True, False]
        assert family_tasks[0].projects == ["home"]
        assert family_tasks[5].projects == ["FamilyHoliday"]

    def test_delete_projects_ignores_case(self, project_tasks, today):
        conf = Conf(projects=ListTagChange(action=Action.DELETE, value=["CAR"]))
        assert edit(project_tasks, None, conf, today) == [False, False, True, True, False, False]
        assert project_tasks[2].subject == "from service @car"
        assert project_tasks[3].subject == "@CAR from service"

    def test_contexts(self, project_tasks, today):
        conf = Conf(contexts=ListTagChange(action=Action.SET, value=["@phone"]))
        assert edit(project_tasks, [0, 1], conf, today) == [True, True]
        assert project_tasks[1].subject == "call @Parents @father +family @phone"

    def test_invalid_pair_is_skipped(self, project_tasks, today):
        conf = Conf(contexts=ListTagChange(action=Action.REPLACE, value=["parents", "parents@"]))
        assert edit(project_tasks, [0], conf, today) == [False]


class TestEditTags:

    @pytest.mark.parametrize(
        "line,act,tags,expected,changed",
        [
            (TAG_LINE, Action.SET, {"game": "here", "item": "puck"}, "item:puck take to who:me game game:here", True),
            (TAG_LINE, Action.DELETE, {"gam": "", "item": ""}, "take to who:me game game:there", True),
            (
                "item:ball take to who:me why:because game game:there",
                Action.DELETE,
                {"game": "", "item": "", "who": "", "wh": ""},
                "take to why:because game",
                True,
            ),
            (TAG_LINE, Action.SET, {"game": "", "item": ""}, "take to who:me game", True),
            (TAG_LINE, Action.SET, {"who": "they", "ite": ""}, "item:ball take to who:they game game:there", True),
            (
                TAG_LINE,
                Action.SET,
                {"who": "they", "item": "puck", "date": "tomorrow", "game": "somewhere"},
                "item:puck take to who:they game game:somewhere date:tomorrow",
                True,
            ),
            (TAG_LINE, Action.SET, {"who": "me", "item": "ball"}, TAG_LINE, False),
            (TAG_LINE, Action.DELETE, {"wh": "", "ite": ""}, TAG_LINE, False),
        ],
    )
    def test_tags(self, today, line, act, tags, expected, changed):
        tasks = _tasks([line], today)
        assert edit(tasks, [0], Conf(tags=tags, tags_act=act), today) == [changed]
        assert tasks[0].subject == expected

    def test_special_tags_are_skipped(self, today):
        tasks = _tasks(["feed cat due:2020-02-10"], today)
        conf = Conf(tags={"due": "", "rec": "1d"}, tags_act=Action.SET)
        assert edit(tasks, [0], conf, today) == [False]


class TestEditSubject:

    def test_replace_first_task_only(self, family_tasks, today):
        changed = edit(family_tasks, [10, 1, 2], Conf(subject="new text +new"), today)
        assert changed == [False, True, False]
        assert family_tasks[1].to_line() == "2018-10-01 new text +new"
        assert family_tasks[2].subject.startswith("repair family car")

    def test_keeps_create_date(self, today):
        tasks = _tasks(["2020-01-01 old text"], today)
        edit(tasks, [0], Conf(subject="new text"), today)
        assert tasks[0].to_line() == "2020-01-01 new text"

    def test_finished_subject_keeps_create_date(self, today):
        """A finished replacement keeps a line that parses back to the same task."""
        tasks = _tasks(["2020-01-01 old text"], today)
        edit(tasks, [0], Conf(subject="x new text"), today)
        assert tasks[0].to_line() == "x 2020-02-02 2020-01-01 new text"
        assert Task.parse(tasks[0].to_line(), today) == tasks[0]

    def test_finished_subject_keeps_finish_date(self, today):
        tasks = _tasks(["x 2020-01-20 2020-01-01 old text"], today)
        edit(tasks, [0], Conf(subject="x new text"), today)
        assert tasks[0].to_line() == "x 2020-01-20 2020-01-01 new text"
        assert Task.parse(tasks[0].to_line(), today) == tasks[0]

    def test_empty_subject_is_refused(self, today):
        tasks = _tasks(["old text"], today)
        assert edit(tasks, [0], Conf(subject="  "), today) == [False]
        assert tasks[0].subject == "old text"


class TestTimers:

    def test_start_stop(self, today):
        tasks = _tasks(["write report", "x old report"], today)
        begin = datetime(2020, 2, 2, 9, 0, tzinfo=timezone.utc)
        end = datetime(2020, 2, 2, 9, 15, tzinfo=timezone.utc)
        assert start(tasks, [0, 1, 5], begin) == [True, False, False]
        assert start(tasks, [0], begin) == [False]
        assert stop(tasks, [0, 1], end) == [True, False]
        assert tasks[0].subject == "write report tmr:off spent:900"
