"""Flow tests: replay orchestrator and command-line front end."""

import io
import json
import logging

import pytest
from decimal import Decimal

from app.main import main
from payments_engine.audit import AuditLogger
from payments_engine.config import EngineSettings
from payments_engine.models import EngineEventType
from payments_engine.orchestrator import ReplayFlow, create_replay_flow
from payments_engine.services.csv_io import CsvTransactionSource


SAMPLE = """type, client, tx, amount
deposit, 1, 1, 1.0
deposit, 2, 2, 2.0
deposit, 1, 3, 2.0
withdrawal, 1, 4, 1.5
withdrawal, 2, 5, 3.0
"""


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings(output_precision=4, account_order="ascending", audit_retention=100)


class TestReplayFlow:
    """Replaying whole streams."""

    def test_sample_stream(self, settings):
        flow = ReplayFlow(settings=settings)
        result = flow.run(CsvTransactionSource(io.StringIO(SAMPLE)))

        assert result.applied == 4
        assert result.rejected == 1
        assert result.malformed == 0
        assert result.processed == 5

        first, second = result.accounts
        assert (first.client, first.available, first.total) == (1, Decimal("1.5"), Decimal("1.5"))
        assert (second.client, second.available, second.total) == (2, Decimal("2"), Decimal("2"))

    def test_malformed_rows_skipped(self, settings, audit_storage):
        data = (
            "type,client,tx,amount\n"
            "deposit,1,1,10\n"
            "refund,1,2,5\n"
            "deposit,1,3,-4\n"
            "withdrawal,1,4,3\n"
        )
        flow = ReplayFlow(audit_logger=AuditLogger(audit_storage), settings=settings)
        result = flow.run(CsvTransactionSource(io.StringIO(data)))

        assert result.malformed == 2
        assert result.applied == 2
        assert result.accounts[0].available == Decimal("7")

        malformed = [
            e for e in audit_storage.get_recent_events()
            if e.event_type == EngineEventType.RECORD_MALFORMED
        ]
        assert sorted(e.line_number for e in malformed) == [3, 4]

    def test_accepts_validated_transactions(self, settings, make_tx):
        flow = ReplayFlow(settings=settings)
        result = flow.run([
            make_tx("deposit", 1, 1, "5"),
            make_tx("dispute", 1, 1),
        ])
        assert result.applied == 2
        assert result.accounts[0].held == Decimal("5")

    def test_stream_events_share_correlation_id(self, settings, audit_storage):
        logger = AuditLogger(audit_storage)
        flow = ReplayFlow(audit_logger=logger, settings=settings)
        flow.run(CsvTransactionSource(io.StringIO(SAMPLE)), source_name="sample")

        events = audit_storage.get_events_by_correlation_id(logger.correlation_id)
        assert events[0].event_type == EngineEventType.STREAM_STARTED
        assert events[-1].event_type == EngineEventType.STREAM_COMPLETED
        assert events[-1].details["rejected"] == 1

    def test_run_to_writes_csv(self, settings):
        out = io.StringIO()
        flow = ReplayFlow(settings=settings)
        flow.run_to(CsvTransactionSource(io.StringIO(SAMPLE)), out)
        assert out.getvalue() == (
            "client,available,held,total,locked\n"
            "1,1.5000,0.0000,1.5000,false\n"
            "2,2.0000,0.0000,2.0000,false\n"
        )

    def test_factory_retains_audit_events(self, settings):
        flow = create_replay_flow(settings)
        flow.run(CsvTransactionSource(io.StringIO(SAMPLE)))
        assert flow.engine.get_account(1) is not None

    def test_factory_without_retention(self):
        flow = create_replay_flow(EngineSettings(audit_retention=0))
        result = flow.run(CsvTransactionSource(io.StringIO(SAMPLE)))
        assert result.applied == 4


class TestCli:
    """The command-line front end."""

    @pytest.fixture(autouse=True)
    def isolate_env(self, monkeypatch, tmp_path):
        """Keep PAYMENTS_ENGINE_* settings and .env files out of these tests."""
        for name in ("OUTPUT_PRECISION", "ACCOUNT_ORDER", "LOG_LEVEL", "LOG_JSON", "AUDIT_RETENTION"):
            monkeypatch.delenv(f"PAYMENTS_ENGINE_{name}", raising=False)
        monkeypatch.chdir(tmp_path)
        yield
        # main() points the root logger at this test's captured stderr
        logging.getLogger().handlers.clear()

    def write_input(self, tmp_path, text=SAMPLE):
        path = tmp_path / "transactions.csv"
        path.write_text(text, encoding="utf-8")
        return path

    def test_writes_accounts_to_stdout(self, tmp_path, capsys):
        path = self.write_input(tmp_path)
        assert main([str(path)]) == 0
        out = capsys.readouterr().out
        assert out.splitlines() == [
            "client,available,held,total,locked",
            "1,1.5000,0.0000,1.5000,false",
            "2,2.0000,0.0000,2.0000,false",
        ]

    def test_rejections_reported_on_stderr(self, tmp_path, capsys):
        path = self.write_input(tmp_path)
        assert main([str(path)]) == 0
        err_lines = capsys.readouterr().err.splitlines()
        events = [json.loads(line) for line in err_lines if line.startswith("{")]
        assert any(e.get("error_code") == "insufficient_funds" for e in events)

    def test_output_file_and_options(self, tmp_path):
        path = self.write_input(
            tmp_path,
            "type,client,tx,amount\ndeposit,2,1,1\ndeposit,1,2,1.123456\n",
        )
        out_path = tmp_path / "accounts.csv"
        code = main([
            str(path), "--output", str(out_path),
            "--order", "first_seen", "--precision", "6",
        ])
        assert code == 0
        assert out_path.read_text(encoding="utf-8").splitlines() == [
            "client,available,held,total,locked",
            "2,1.000000,0.000000,1.000000,false",
            "1,1.123456,0.000000,1.123456,false",
        ]

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.csv")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_bad_header(self, tmp_path, capsys):
        path = self.write_input(tmp_path, "kind,who\ndeposit,1\n")
        assert main([str(path)]) == 1
        assert "missing required columns" in capsys.readouterr().err

    def test_invalid_precision(self, tmp_path, capsys):
        path = self.write_input(tmp_path)
        assert main([str(path), "--precision", "2"]) == 2
        assert "Invalid options" in capsys.readouterr().err

    def test_invalid_utf8_input(self, tmp_path, capsys):
        path = tmp_path / "transactions.csv"
        path.write_bytes(b"type,client,tx,amount\ndeposit,1,1,\xff\n")
        assert main([str(path)]) == 1
        assert "unreadable input" in capsys.readouterr().err

    def test_oversized_field(self, tmp_path, capsys):
        path = self.write_input(
            tmp_path, "type,client,tx,amount\ndeposit,1,1," + "1" * 200_000 + "\n"
        )
        assert main([str(path)]) == 1
        assert "unreadable input" in capsys.readouterr().err

    def test_oversized_amount_does_not_stop_the_run(self, tmp_path, capsys):
        path = self.write_input(
            tmp_path, "type,client,tx,amount\ndeposit,1,1,1e100\ndeposit,2,2,5\n"
        )
        assert main([str(path)]) == 0
        assert capsys.readouterr().out.splitlines() == [
            "client,available,held,total,locked",
            "2,5.0000,0.0000,5.0000,false",
        ]
