"""
CLI tests — argument parsing, command dispatch, exit codes and output.
"""
import os

import pytest

from mameutility.cli import CLIApplication, main
from mameutility.core.parser import read_record_set
from mameutility.core.codec import read_dat


def run_cli(argv):
    app = CLIApplication()
    app.run(argv)
    return app


class TestArgumentParsing:

    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            CLIApplication.parse_args([])

    def test_partition_arguments(self):
        args = CLIApplication.parse_args(["year", "-i", "mame.xml", "-o", "out", "-v"])
        assert args.command == "year"
        assert args.input == "mame.xml"
        assert args.verbose is True
        assert args.log_file == "ErrorLog.txt"

    def test_copy_arguments(self):
        args = CLIApplication.parse_args(["copy-images", "a.xml", "b.xml", "-s", "snap", "-d", "out", "-w", "4"])
        assert args.inputs == ["a.xml", "b.xml"]
        assert args.workers == 4

    def test_unknown_subcommand_rejected(self):
        with pytest.raises(SystemExit):
            CLIApplication.parse_args(["genre", "-i", "x", "-o", "y"])


class TestCommands:

    def test_full_list(self, sample_catalog, temp_dir, capsys):
        output = temp_dir / "full.xml"
        run_cli(["full", "-i", str(sample_catalog), "-o", str(output), "--log-file", str(temp_dir / "log.txt")])

        assert len(read_record_set(output)[1]) == 4
        assert "Wrote 1 file(s)" in capsys.readouterr().out

    def test_year_partition_quiet(self, sample_catalog, temp_dir, capsys):
        out = temp_dir / "years"
        run_cli(["year", "-i", str(sample_catalog), "-o", str(out), "-q", "--log-file", ""])

        assert (out / "198X.xml").exists()
        assert capsys.readouterr().out == ""

    def test_softwarelist(self, software_dir, temp_dir):
        output = temp_dir / "software.xml"
        run_cli(["softwarelist", "-i", str(software_dir), "-o", str(output), "--log-file", ""])
        assert len(read_record_set(output)[1]) == 4

    def test_merge_and_dat_info(self, record_set_files, temp_dir, capsys):
        merged = temp_dir / "merged.xml"
        run_cli(["merge", str(record_set_files["machines"]), str(record_set_files["softwares"]),
                 "-o", str(merged), "--log-file", ""])
        assert read_dat(temp_dir / "merged.dat").names() == ["M1", "S1"]
        capsys.readouterr()

        run_cli(["dat-info", str(temp_dir / "merged.dat"), "--log-file", ""])
        out = capsys.readouterr().out
        assert "2 records" in out
        assert "M1\tDesc1" in out

    def test_copy_roms_prints_summary(self, record_set_files, temp_dir, capsys):
        roms = temp_dir / "roms"
        roms.mkdir()
        (roms / "M1.zip").write_bytes(b"rom")
        run_cli(["copy-roms", str(record_set_files["machines"]), "-s", str(roms), "-d", str(temp_dir / "out"),
                 "--log-file", ""])

        assert (temp_dir / "out" / "M1.zip").exists()
        assert "Copied: 1" in capsys.readouterr().out

    def test_log_file_written(self, sample_catalog, temp_dir):
        log_file = temp_dir / "ErrorLog.txt"
        run_cli(["sourcefile", "-i", str(sample_catalog), "-o", str(temp_dir / "src"),
                 "--log-file", str(log_file)])
        assert "Found 3 groups to process." in log_file.read_text(encoding="utf-8")


class TestErrorsAndExitCodes:

    def test_domain_error_exits_with_1(self, temp_dir, capsys):
        with pytest.raises(SystemExit) as exc:
            run_cli(["softwarelist", "-i", str(temp_dir / "missing"), "-o", str(temp_dir / "o.xml"),
                     "--log-file", ""])
        assert exc.value.code == 1
        assert "❌ Error:" in capsys.readouterr().err

    def test_parameter_error_exits_with_1(self, temp_dir, capsys):
        with pytest.raises(SystemExit) as exc:
            run_cli(["softwarelist", "-i", str(temp_dir), "-o", str(temp_dir / "o.xml"), "-w", "0",
                     "--log-file", ""])
        assert exc.value.code == 1
        assert "Parameter error" in capsys.readouterr().err

    def test_cancelled_run_exits_with_130(self, sample_catalog, temp_dir, monkeypatch):
        monkeypatch.setattr(CLIApplication, "stopped_flag", lambda self: True)
        with pytest.raises(SystemExit) as exc:
            run_cli(["year", "-i", str(sample_catalog), "-o", str(temp_dir / "y"), "--log-file", ""])
        assert exc.value.code == 130

    def test_main_maps_keyboard_interrupt(self, monkeypatch):
        def interrupted(self, argv=None):
            raise KeyboardInterrupt

        monkeypatch.setattr(CLIApplication, "run", interrupted)
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 130

    def test_main_reraises_in_debug_mode(self, monkeypatch):
        def broken(self, argv=None):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(CLIApplication, "run", broken)
        monkeypatch.setenv("DEBUG", "1")
        with pytest.raises(RuntimeError):
            main([])

        monkeypatch.delenv("DEBUG")
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1
        assert "DEBUG" not in os.environ
