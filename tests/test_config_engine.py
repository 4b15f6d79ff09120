"""Tests for the Config Engine."""
import json

import pytest

from stratus_sim.config_engine import (
    ApplyResult,
    ConfigApplier,
    ConfigParser,
    DirectiveKind,
    InContext,
    NoContext,
    apply_config_block,
    parse_vlan_id,
)
from stratus_sim.cli import interpret
from stratus_sim.config_engine.applier import _WorkingCopy
from stratus_sim.device import InterfaceStatus, Severity
from stratus_sim.utils.audit_log import ChangeTracker, get_recent_changes, setup_audit_logging


class TestConfigParser:
    """Tests for the ConfigParser."""

    def test_parse_empty(self):
        parser = ConfigParser()
        assert parser.parse("") == []
        assert parser.parse("\n\n   \n") == []

    def test_parse_kinds(self):
        """Each supported line maps to its directive kind."""
        parser = ConfigParser()
        block = """
        enable
        configure terminal
        ! comment
        interface Ethernet2
        description Storage array
        switchport access vlan 30
        shutdown
        no shutdown
        exit
        """

        kinds = [d.kind for d in parser.parse(block)]

        assert kinds == [
            DirectiveKind.IGNORED,
            DirectiveKind.IGNORED,
            DirectiveKind.COMMENT,
            DirectiveKind.INTERFACE,
            DirectiveKind.DESCRIPTION,
            DirectiveKind.ACCESS_VLAN,
            DirectiveKind.SHUTDOWN,
            DirectiveKind.NO_SHUTDOWN,
            DirectiveKind.EXIT,
        ]

    def test_parse_interface_name(self):
        directive = ConfigParser().parse_line("interface Ethernet2")
        assert directive.argument == "Ethernet2"

    def test_bare_interface_ignored(self):
        assert ConfigParser().parse_line("interface").kind == DirectiveKind.IGNORED

    def test_description_remainder(self):
        """Description is everything after the first space."""
        directive = ConfigParser().parse_line("description  Rack 4  uplink")
        assert directive.argument == " Rack 4  uplink"

    def test_description_without_text(self):
        assert ConfigParser().parse_line("description").argument == ""

    def test_shutdown_with_argument_ignored(self):
        """Only the bare keyword is a contextual shutdown."""
        assert ConfigParser().parse_line("shutdown et1").kind == DirectiveKind.IGNORED

    def test_line_numbers(self):
        directives = ConfigParser().parse("interface et1\n\nshutdown")
        assert [d.line_no for d in directives] == [1, 3]

    def test_splits_on_newline_only(self):
        """Form feeds and other separators stay inside the line."""
        directives = ConfigParser().parse("interface et1\ndescription Rack\x0c4\u2028B\r\nexit")
        assert [d.kind for d in directives] == [
            DirectiveKind.INTERFACE,
            DirectiveKind.DESCRIPTION,
            DirectiveKind.EXIT,
        ]
        assert directives[1].argument == "Rack\x0c4\u2028B"


class TestParseVlanId:
    """Tests for VLAN token parsing."""

    @pytest.mark.parametrize("token,expected", [
        ("30", 30),
        ("4094", 4094),
        ("vlan", 1),
        ("", 1),
        ("0", 0),
        ("-5", 1),
        ("3x", 1),
    ])
    def test_parse(self, token, expected):
        assert parse_vlan_id(token) == expected


class TestConfigApplier:
    """Tests for applying configuration blocks."""

    def test_access_vlan_creates_vlan(self, state):
        """Assigning an unknown VLAN creates it; other interfaces are untouched."""
        others = [i for i in state.interfaces if i.id != "et2"]

        apply_config_block("interface Ethernet2\nswitchport access vlan 30\nexit", state)

        assert state.get_interface("et2").vlan == 30
        assert 30 in state.vlans
        assert state.vlans == (1, 10, 20, 30, 99)
        assert [state.get_interface(i.id) for i in others] == others

    def test_no_context_no_mutation(self, state):
        """Contextual directives without an interface line do nothing."""
        before = state.to_dict()
        apply_config_block("shutdown", state)
        apply_config_block("no shutdown\ndescription x\nswitchport access vlan 5", state)
        assert state.to_dict() == before

    def test_shutdown_logs_config_agent(self, state):
        apply_config_block("interface et1\nshutdown", state)

        assert state.get_interface("et1").status == InterfaceStatus.ADMIN_DOWN
        entry = state.logs[-1]
        assert entry.severity == Severity.WARNING
        assert entry.process == "ConfigAgent"
        assert entry.message == "Ethernet1 disabled via AI Agent"

    def test_no_shutdown_logs_config_agent(self, state):
        apply_config_block("interface Ethernet4\nno shutdown", state)

        assert state.get_interface("et4").status == InterfaceStatus.UP
        assert state.logs[-1].severity == Severity.INFO
        assert state.logs[-1].message == "Ethernet4 enabled via AI Agent"

    def test_description_no_log(self, state):
        before = len(state.logs)
        apply_config_block("interface et3\ndescription Lab printers", state)
        assert state.get_interface("et3").description == "Lab printers"
        assert len(state.logs) == before

    def test_exit_clears_context(self, state):
        apply_config_block("interface et1\nexit\nshutdown", state)
        assert state.get_interface("et1").status == InterfaceStatus.UP

    def test_unknown_interface_keeps_context(self, state):
        """A missed interface line leaves the previous context in place."""
        apply_config_block("interface et1\ninterface Ethernet99\ndescription still et1", state)
        assert state.get_interface("et1").description == "still et1"

    def test_unknown_interface_without_context(self, state):
        before = state.to_dict()
        apply_config_block("interface Ethernet99\nshutdown", state)
        assert state.to_dict() == before

    def test_context_switch(self, state):
        block = """
        interface et1
        description first
        interface et2
        description second
        """
        apply_config_block(block, state)
        assert state.get_interface("et1").description == "first"
        assert state.get_interface("et2").description == "second"

    def test_context_reset_between_blocks(self, state):
        apply_config_block("interface et1", state)
        apply_config_block("shutdown", state)
        assert state.get_interface("et1").status == InterfaceStatus.UP

    def test_unparseable_vlan_defaults_to_one(self, state):
        apply_config_block("interface et2\nswitchport access vlan\n", state)
        assert state.get_interface("et2").vlan == 1

    def test_vlan_zero_kept_out_of_vlan_set(self, state):
        """VLAN 0 lands on the interface but is never created."""
        result = ConfigApplier(state).apply("interface et2\nswitchport access vlan 0\nexit")

        assert state.get_interface("et2").vlan == 0
        assert state.vlans == (1, 10, 20, 99)
        assert result.vlans_created == []

    def test_multiple_changes_same_interface(self, state):
        block = "interface et3\nno shutdown\nswitchport access vlan 77\ndescription Cameras\nshutdown"
        apply_config_block(block, state)

        et3 = state.get_interface("et3")
        assert et3.status == InterfaceStatus.ADMIN_DOWN
        assert et3.vlan == 77
        assert et3.description == "Cameras"
        assert [e.message for e in state.logs[-2:]] == [
            "Ethernet3 enabled via AI Agent",
            "Ethernet3 disabled via AI Agent",
        ]

    @pytest.mark.parametrize("block", [
        "",
        "! Error generating configuration. Please check system logs.",
        "! Error: API Key not configured.",
        "```\nrandom text\n```",
        "interface",
        "switchport access vlan abc",
        "\x00\x01 garbage",
    ])
    def test_untrusted_text_never_raises(self, state, block):
        before = state.to_dict()
        assert apply_config_block(block, state) is None
        assert state.to_dict() == before

    def test_generated_block_with_preamble(self, state):
        """Typical collaborator output with enable / configure terminal."""
        block = """enable
configure terminal
interface Ethernet3
no shutdown
switchport access vlan 20
exit
end"""
        apply_config_block(block, state)
        assert state.get_interface("et3").status == InterfaceStatus.UP
        assert state.vlans == (1, 10, 20, 99)

    def test_ids_and_order_stable(self, state):
        ids = [i.id for i in state.interfaces]
        apply_config_block("interface ma1\nswitchport access vlan 5\ninterface et1\nshutdown", state)
        assert [i.id for i in state.interfaces] == ids


class TestStateMachine:
    """Tests for the interface context transitions."""

    def _step(self, state, context, line):
        applier = ConfigApplier(state)
        directive = applier.parser.parse_line(line)
        return applier._step(context, directive, _WorkingCopy(state), ApplyResult())

    def test_enter(self, state):
        assert self._step(state, NoContext(), "interface Ethernet1") == InContext("et1")

    def test_switch(self, state):
        assert self._step(state, InContext("et1"), "interface et2") == InContext("et2")

    def test_unknown_keeps(self, state):
        assert self._step(state, InContext("et1"), "interface et9") == InContext("et1")
        assert self._step(state, NoContext(), "interface et9") == NoContext()

    def test_exit(self, state):
        assert self._step(state, InContext("et1"), "exit") == NoContext()
        assert self._step(state, NoContext(), "exit") == NoContext()

    def test_contextual_keeps_context(self, state):
        assert self._step(state, InContext("et1"), "shutdown") == InContext("et1")


class TestApplyResult:
    """Tests for the apply result and audit trail."""

    def test_result(self, state):
        applier = ConfigApplier(state)
        result = applier.apply("interface et2\nswitchport access vlan 30\nfoo\nexit")

        assert result.lines == 4
        assert result.directives_applied == 1
        assert result.ignored_lines == 1
        assert result.interfaces_changed == ["Ethernet2"]
        assert result.vlans_created == [30]
        assert "Ethernet2" in result.summary()

    def test_no_change(self, state):
        result = ConfigApplier(state).apply("! nothing")
        assert result.no_change
        assert result.summary() == "No changes applied"

    def test_audit_record(self, state, tmp_path):
        audit_file = setup_audit_logging(str(tmp_path))
        applier = ConfigApplier(state, tracker=ChangeTracker(state.hostname))

        applier.apply("interface et1\nshutdown", source="gemini", intent="disable uplink")

        line = audit_file.read_text().strip().splitlines()[-1]
        record = json.loads(line)
        assert record["operation"] == "intent_apply"
        assert record["source"] == "gemini"
        assert record["interfaces_changed"] == ["Ethernet1"]

        changes = get_recent_changes(str(audit_file), hostname="stratus-sw01")
        assert changes[0].intent == "disable uplink"

    def test_audit_record_follows_rename(self, state, tmp_path):
        """A hostname change is reflected in later audit records."""
        audit_file = setup_audit_logging(str(tmp_path))
        applier = ConfigApplier(state, tracker=ChangeTracker())

        interpret("hostname edge01", state)
        applier.apply("interface et1\nshutdown")

        record = json.loads(audit_file.read_text().strip().splitlines()[-1])
        assert record["hostname"] == "edge01"
        assert get_recent_changes(str(audit_file), hostname="edge01")
        assert get_recent_changes(str(audit_file), hostname="stratus-sw01") == []
