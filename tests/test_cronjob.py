import pytest

from clusterlens.analyzers.cronjob import (
    CronJobAnalyzer,
    CronScheduleError,
    check_cron_schedule_is_valid,
)
from clusterlens.common import AnalysisContext
from clusterlens.kube import Client


def cronjob(schedule, namespace="default", **extra_spec):
    return {
        "kind": "CronJob",
        "metadata": {
            "name": "example-cronjob",
            "namespace": namespace,
            "annotations": {"analysisDate": "2022-04-01"},
            "labels": {"app": "example-app"},
        },
        "spec": {
            "schedule": schedule,
            "concurrencyPolicy": "Allow",
            "jobTemplate": {
                "metadata": {"labels": {"app": "example-app"}},
                "spec": {
                    "template": {
                        "spec": {
                            "containers": [{"name": "example-container", "image": "nginx"}],
                            "restartPolicy": "OnFailure",
                        }
                    }
                },
            },
            **extra_spec,
        },
    }


def run(*objects):
    return CronJobAnalyzer().analyze(AnalysisContext(client=Client(*objects), namespace="default"))


def test_cronjob_success():
    assert len(run(cronjob("*/1 * * * *"))) == 0


def test_cronjob_broken():
    results = run(cronjob("*** * * * *"))
    assert len(results) == 1
    assert results[0].name == "default/example-cronjob"
    assert results[0].kind == "CronJob"
    assert results[0].error[0].text.startswith(
        "CronJob example-cronjob has an invalid schedule: "
    )


def test_cronjob_broken_multiple_namespace_filtering():
    results = run(cronjob("*** * * * *"), cronjob("*** * * * *", "other-namespace"))
    assert len(results) == 1
    assert results[0].name == "default/example-cronjob"
    assert results[0].kind == "CronJob"


def test_suspended_cronjob():
    results = run(cronjob("*** * * * *", suspend=True))
    assert [failure.text for failure in results[0].error] == ["CronJob example-cronjob is suspended"]


def test_negative_starting_deadline():
    results = run(cronjob("*/1 * * * *", startingDeadlineSeconds=-10))
    assert [failure.text for failure in results[0].error] == [
        "CronJob example-cronjob has a negative starting deadline"
    ]


@pytest.mark.parametrize(
    "schedule",
    ["*/1 * * * *", "0 0 1 JAN MON", "5-10/2 1,2 ? * sun", "@daily", "@every 1h30m"],
)
def test_valid_schedules(schedule):
    assert check_cron_schedule_is_valid(schedule) is True


@pytest.mark.parametrize(
    "schedule",
    ["", "*** * * * *", "* * * *", "60 * * * *", "5-1 * * * *", "* * * * 7", "@bogus", "1-2-3 * * * *"],
)
def test_invalid_schedules(schedule):
    with pytest.raises(CronScheduleError):
        check_cron_schedule_is_valid(schedule)


def test_field_count_message():
    with pytest.raises(CronScheduleError, match="expected exactly 5 fields, found 4"):
        check_cron_schedule_is_valid("* * * *")