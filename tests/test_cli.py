import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from fddtree.cli import cli
from fddtree.exceptions import StorageError


@pytest.fixture
def runner():
    """A CliRunner working in a fresh temporary directory."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        yield runner


@pytest.fixture
def planned(runner):
    """A document with Acme/Shop/UI/Orders/Checkout and two features."""
    commands = [
        ["init", "Acme"],
        ["node", "add", "Acme", "project", "Shop"],
        ["node", "add", "Acme/Shop", "aspect", "UI"],
        ["node", "add", "Acme/Shop/UI", "subject", "Orders", "--prefix", "ORD"],
        ["node", "add", "Acme/Shop/UI/Orders", "activity", "Checkout", "--initials", "AB"],
        ["node", "add", "Acme/Shop/UI/Orders/Checkout", "feature", "Pay by card"],
        ["node", "add", "Acme/Shop/UI/Orders/Checkout", "feature", "Pay by invoice"],
    ]
    for args in commands:
        result = runner.invoke(cli, args)
        assert result.exit_code == 0, result.output
    return runner


def show_json(runner, *args):
    result = runner.invoke(cli, ["show", "--json", *args])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


def test_cli_registers_groups():
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for name in ("init", "show", "node", "milestone", "search", "wp", "config"):
        assert name in result.output


def test_init_creates_document(runner):
    result = runner.invoke(cli, ["init", "Acme"])

    assert result.exit_code == 0
    assert "Planning document initialized" in result.output
    data = json.loads(Path("plan.fddi.json").read_text())
    assert data["root"]["name"] == "Acme"


def test_init_with_file_option(runner):
    result = runner.invoke(cli, ["-f", "other.json", "init", "Acme"])

    assert result.exit_code == 0
    assert Path("other.json").exists()
    assert not Path("plan.fddi.json").exists()


def test_init_existing_asks_for_confirmation(runner):
    runner.invoke(cli, ["init", "Acme"])

    result = runner.invoke(cli, ["init", "Other"], input="n\n")

    assert result.exit_code != 0
    assert show_json(runner)["name"] == "Acme"


def test_init_force_overwrites(runner):
    runner.invoke(cli, ["init", "Acme"])

    result = runner.invoke(cli, ["init", "Other", "--force"])

    assert result.exit_code == 0
    assert show_json(runner)["name"] == "Other"


def test_command_without_document(runner):
    result = runner.invoke(cli, ["show"])

    assert result.exit_code != 0
    assert "fddtree init" in result.output


def test_show_tree(planned):
    result = planned.invoke(cli, ["show"])

    assert result.exit_code == 0
    assert "[program] Acme (0%)" in result.output
    assert "[feature] #2 Pay by invoice" in result.output


def test_show_depth(planned):
    result = planned.invoke(cli, ["show", "--depth", "1"])

    assert result.exit_code == 0
    assert "Shop" in result.output
    assert "UI" not in result.output


def test_show_json_structure(planned):
    data = show_json(planned, "Acme/Shop/UI/Orders/Checkout")

    assert data["kind"] == "activity"
    assert [f["seq"] for f in data["children"]] == [1, 2]
    assert len(data["children"][0]["milestones"]) == 6


def test_show_feature_by_seq(planned):
    data = show_json(planned, "#2")

    assert data["name"] == "Pay by invoice"


def test_show_missing_path(planned):
    result = planned.invoke(cli, ["show", "Acme/Nope"])

    assert result.exit_code != 0
    assert "not found" in result.output


def test_add_rejects_wrong_kind(planned):
    result = planned.invoke(cli, ["node", "add", "Acme/Shop", "feature", "Loose"])

    assert result.exit_code != 0
    assert "Operation Error" in result.output


def test_add_rejects_mixed_program_children(planned):
    result = planned.invoke(cli, ["node", "add", "Acme", "program", "Sub"])

    assert result.exit_code != 0
    assert "cannot hold a program" in result.output


def test_milestone_set_updates_completion(planned):
    result = planned.invoke(
        cli, ["milestone", "set", "#1", "2", "-s", "complete", "-a", "2024-01-15"]
    )

    assert result.exit_code == 0
    assert "is 40% complete" in result.output
    data = show_json(planned, "#1")
    assert data["completion"] == 40
    assert data["milestones"][1]["actual"] == "2024-01-15"
    assert show_json(planned)["completion"] == 20


def test_milestone_set_requires_update(planned):
    result = planned.invoke(cli, ["milestone", "set", "#1", "1"])

    assert result.exit_code != 0
    assert "No update parameters provided" in result.output


def test_milestone_set_bad_date(planned):
    result = planned.invoke(cli, ["milestone", "set", "#1", "1", "-p", "not a date"])

    assert result.exit_code != 0
    assert "Invalid date format" in result.output


def test_milestone_list(planned):
    result = planned.invoke(cli, ["milestone", "list", "#1"])

    assert result.exit_code == 0
    assert "1. Domain Walkthrough: notstarted" in result.output
    assert "6. Promote to Build" in result.output


def test_milestone_list_rejects_non_feature(planned):
    result = planned.invoke(cli, ["milestone", "list", "Acme/Shop"])

    assert result.exit_code != 0
    assert "is not a feature" in result.output


def test_add_rejects_field_missing_on_kind(planned):
    result = planned.invoke(
        cli, ["node", "add", "Acme/Shop/UI", "subject", "Billing", "--initials", "AB"]
    )

    assert result.exit_code != 0
    assert "Validation Error" in result.output
    assert len(show_json(planned, "Acme/Shop/UI")["children"]) == 1


def test_milestone_defs(planned):
    result = planned.invoke(cli, ["milestone", "defs", "Acme/Shop/UI"])

    assert result.exit_code == 0
    assert "2. Design (effort 40)" in result.output
    assert "Total effort: 100" in result.output


def test_milestone_define_adds_feature_rows(planned):
    planned.invoke(cli, ["milestone", "set", "#1", "1", "-s", "complete"])

    result = planned.invoke(
        cli, ["milestone", "define", "Acme/Shop/UI", "Review", "-e", "100", "-n", "1"]
    )

    assert result.exit_code == 0
    data = show_json(planned, "#1")
    assert len(data["milestones"]) == 7
    assert data["milestones"][0]["status"] == "notstarted"
    assert data["milestones"][1]["status"] == "complete"
    assert data["completion"] == 0


def test_milestone_undefine_drops_feature_rows(planned):
    result = planned.invoke(cli, ["milestone", "undefine", "Acme/Shop/UI", "6"])

    assert result.exit_code == 0
    assert len(show_json(planned, "#2")["milestones"]) == 5


def test_milestone_redefine_effort(planned):
    planned.invoke(cli, ["milestone", "set", "#1", "1", "-s", "complete"])

    result = planned.invoke(cli, ["milestone", "redefine", "Acme/Shop/UI", "1", "-e", "99"])

    assert result.exit_code == 0
    assert show_json(planned, "#1")["completion"] == 50


def test_milestone_redefine_negative_effort(planned):
    result = planned.invoke(cli, ["milestone", "redefine", "Acme/Shop/UI", "1", "-e", "-5"])

    assert result.exit_code != 0
    assert "Validation Error" in result.output


def test_milestone_reset_standard_is_noop(planned):
    result = planned.invoke(cli, ["milestone", "reset", "Acme/Shop/UI"])

    assert result.exit_code == 0
    assert "Nothing to change" in result.output


def test_milestone_defs_rejects_non_aspect(planned):
    result = planned.invoke(cli, ["milestone", "defs", "#1"])

    assert result.exit_code != 0
    assert "is not an aspect" in result.output


def test_rename(planned):
    result = planned.invoke(cli, ["node", "rename", "#1", "Pay by cash"])

    assert result.exit_code == 0
    assert show_json(planned, "#1")["name"] == "Pay by cash"


def test_edit_initials(planned):
    result = planned.invoke(cli, ["node", "edit", "Acme/1/1/1/1", "--initials", "CD"])

    assert result.exit_code == 0
    data = json.loads(Path("plan.fddi.json").read_text())
    checkout = data["root"]["projects"][0]["aspects"][0]["subjects"][0]["activities"][0]
    assert checkout["initials"] == "CD"


def test_move_reorders(planned):
    result = planned.invoke(
        cli, ["node", "move", "#2", "Acme/Shop/UI/Orders/Checkout", "--index", "0"]
    )

    assert result.exit_code == 0
    data = show_json(planned, "Acme/Shop/UI/Orders/Checkout")
    assert [f["seq"] for f in data["children"]] == [2, 1]


def test_move_into_own_subtree_rejected(planned):
    result = planned.invoke(cli, ["node", "move", "Acme/Shop/UI", "Acme/Shop/UI/Orders"])

    assert result.exit_code != 0


def test_place_after(planned):
    result = planned.invoke(cli, ["node", "place", "#1", "#2", "--after"])

    assert result.exit_code == 0
    data = show_json(planned, "Acme/Shop/UI/Orders/Checkout")
    assert [f["seq"] for f in data["children"]] == [2, 1]


def test_copy_allocates_new_sequence(planned):
    planned.invoke(cli, ["node", "add", "Acme/Shop/UI/Orders", "activity", "Returns"])

    result = planned.invoke(cli, ["node", "copy", "#1", "Acme/Shop/UI/Orders/Returns"])

    assert result.exit_code == 0
    data = show_json(planned, "Acme/Shop/UI/Orders/Returns")
    assert [f["seq"] for f in data["children"]] == [3]


def test_delete(planned):
    result = planned.invoke(cli, ["node", "delete", "#2", "--yes"])

    assert result.exit_code == 0
    data = show_json(planned, "Acme/Shop/UI/Orders/Checkout")
    assert [f["name"] for f in data["children"]] == ["Pay by card"]


def test_delete_root_rejected(planned):
    result = planned.invoke(cli, ["node", "delete", "Acme", "--yes"])

    assert result.exit_code != 0
    assert "root node cannot be deleted" in result.output


def test_search(planned):
    result = planned.invoke(cli, ["search", "pay by"])

    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert len(lines) == 2
    assert "Acme/Shop/UI/Orders/Checkout/Pay by card" in lines[0]


def test_search_no_match(planned):
    result = planned.invoke(cli, ["search", "zzz"])

    assert result.exit_code == 0
    assert "No nodes match" in result.output


def test_work_packages(planned):
    assert planned.invoke(cli, ["wp", "add", "Acme/Shop", "Sprint 1"]).exit_code == 0
    assert planned.invoke(cli, ["wp", "assign", "#2", "Sprint 1"]).exit_code == 0

    result = planned.invoke(cli, ["wp", "list", "Acme/Shop"])

    assert result.exit_code == 0
    assert "Sprint 1 (1 features)" in result.output
    assert "#2 Pay by invoice" in result.output


def test_work_package_duplicate(planned):
    planned.invoke(cli, ["wp", "add", "Acme/Shop", "Sprint 1"])

    result = planned.invoke(cli, ["wp", "add", "Acme/Shop", "Sprint 1"])

    assert result.exit_code != 0
    assert "already exists" in result.output


def test_work_package_assign_unknown(planned):
    result = planned.invoke(cli, ["wp", "assign", "#1", "Nope"])

    assert result.exit_code != 0
    assert "not found" in result.output


def test_work_package_prune(planned):
    planned.invoke(cli, ["wp", "add", "Acme/Shop", "Sprint 1"])
    planned.invoke(cli, ["wp", "assign", "#2", "Sprint 1"])
    planned.invoke(cli, ["node", "delete", "#2", "--yes"])

    result = planned.invoke(cli, ["wp", "prune", "Acme/Shop"])

    assert result.exit_code == 0
    assert "Removed 1 stale reference(s)." in result.output


def test_config_show_defaults(runner):
    result = runner.invoke(cli, ["config", "show", "--json"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["program_exclusivity"] is True
    assert data["default_document"] == "plan.fddi.json"


def test_config_show_reads_file(runner):
    Path(".fddtree").mkdir()
    Path(".fddtree/config.json").write_text(json.dumps({"undo_limit": 25}))

    result = runner.invoke(cli, ["config", "show"])

    assert result.exit_code == 0
    assert "undo_limit: 25" in result.output


@patch("fddtree.commands.common.FDDCore")
def test_load_error_reported(mock_core, runner):
    Path("plan.fddi.json").write_text("{}")
    mock_core.open.side_effect = StorageError("Failed to load plan.fddi.json")

    result = runner.invoke(cli, ["show"])

    assert result.exit_code != 0
    assert "Failed to load plan.fddi.json" in result.output
