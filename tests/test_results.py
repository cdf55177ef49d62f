from datetime import timedelta

from biathlon_core import BufferSink, EventKind, RaceConfig, RaceSystem, summarize


def _system():
    config = RaceConfig(
        laps=1, firing_lines=1, start="10:00:00.000", start_delta="00:00:10"
    )
    return RaceSystem(config, sink=BufferSink())


def test_summarize_reports_each_status_in_id_order():
    rs = _system()
    # 3: finished clean
    rs.process_event("09:00:00.000", EventKind.REGISTRATION, 3)
    rs.process_event("09:00:01.000", EventKind.START_TIME_SET, 3, "10:00:00.000")
    rs.process_event("10:00:01.000", EventKind.STARTED, 3)
    rs.process_event("10:10:00.000", EventKind.ON_FIRING_RANGE, 3, "1")
    for target in range(1, 5):
        rs.process_event("10:10:01.000", EventKind.SHOT, 3, str(target))
    rs.process_event("10:10:30.000", EventKind.LEFT_FIRING_RANGE, 3)
    rs.process_event("10:11:00.000", EventKind.ENTERED_PENALTY, 3)
    rs.process_event("10:11:30.000", EventKind.LEFT_PENALTY, 3)
    rs.process_event("10:20:00.500", EventKind.LAP_COMPLETED, 3)
    # 1: registered only
    rs.process_event("09:00:00.000", EventKind.REGISTRATION, 1)
    # 2: started, never finished
    rs.process_event("09:00:00.000", EventKind.REGISTRATION, 2)
    rs.process_event("10:00:02.000", EventKind.STARTED, 2)
    # 4: late start
    rs.process_event("10:00:30.000", EventKind.STARTED, 4)

    rows = summarize(rs)
    assert [row.competitor_id for row in rows] == [1, 2, 3, 4]
    assert [row.status for row in rows] == [
        "NotStarted",
        "NotFinished",
        "Finished",
        "Disqualified",
    ]

    finished = rows[2]
    assert finished.total_time == timedelta(minutes=20, milliseconds=500)
    assert finished.hits == 4
    assert finished.shots == 4
    assert finished.penalty_laps == 0
    assert finished.laps_completed == 1

    assert rows[0].total_time is None
    assert rows[3].reason.startswith("late start")


def test_summarize_empty_race():
    assert summarize(_system()) == ()
