from app.core.classifier import suggest_classification


def test_water_issues_are_urgent_plumbing():
    result = suggest_classification("Pipe burst, the bathroom is flooding")
    assert result.category == "plumbing"
    assert result.priority == "urgent"
    assert result.advice


def test_power_outage_is_high_electrical():
    result = suggest_classification("Power outage in the whole flat")
    assert (result.category, result.priority) == ("electrical", "high")


def test_flickering_light_is_medium_electrical():
    result = suggest_classification("Hallway light flickers")
    assert (result.category, result.priority) == ("electrical", "medium")


def test_lost_key_goes_to_locksmith():
    assert suggest_classification("Lost my key").category == "locksmith"


def test_no_keyword_is_general_without_advice():
    result = suggest_classification("Neighbour plays drums at night")
    assert result == ("general", "medium", None)
    assert suggest_classification(None).category == "general"
