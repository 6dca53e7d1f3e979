"""
Tests for the memtree CLI.
"""

import json
import logging
import subprocess
from pathlib import Path

import pytest
from click.testing import CliRunner
from memtree.cli.main import cli
from memtree.core.config import ENV_PREFIX
from memtree.utils.logger import setup_logging

MEMBERS = [
    "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed",
    "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359",
    "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB",
]

SHAPE = ["--depth", "3", "--arity", "2"]


@pytest.fixture
def runner(monkeypatch, tmp_path):
    for name in ("TREE_DEPTH", "TREE_ARITY", "ZERO_SENTINEL", "DATA_DIR", "INPUTS_DIR", "BUILD_DIR", "CIRCUIT_NAME", "LOG_LEVEL"):
        monkeypatch.setenv(ENV_PREFIX + name, "")
        monkeypatch.delenv(ENV_PREFIX + name)
    monkeypatch.chdir(tmp_path)
    yield CliRunner()
    # Handlers created inside the runner point at its captured stderr
    setup_logging(level=logging.INFO)


@pytest.fixture
def members_file(tmp_path):
    path = tmp_path / "members.json"
    path.write_text(json.dumps({"members": MEMBERS}))
    return path


@pytest.fixture
def leaves_file(runner, members_file):
    result = runner.invoke(cli, ["hash-leaves", str(members_file)])
    assert result.exit_code == 0, result.output
    return Path("data/hashedLeaves.json")


@pytest.fixture
def input_file(runner, leaves_file):
    result = runner.invoke(cli, ["build-input", str(leaves_file), "--index", "1"] + SHAPE)
    assert result.exit_code == 0, result.output
    return Path("inputs/membership_input.json")


class TestLeavesAndRoots:
    """hash-leaves / root"""

    def test_hash_leaves(self, runner, leaves_file):
        """Default output is one decimal leaf per member."""
        data = json.loads(leaves_file.read_text())
        assert len(data) == len(MEMBERS)
        assert all(isinstance(x, str) and x.isdigit() for x in data)

    def test_hash_leaves_show_checksummed(self, runner, members_file):
        """--show prints members in EIP-55 form."""
        result = runner.invoke(cli, ["hash-leaves", str(members_file), "--show"])
        assert result.exit_code == 0
        for address in MEMBERS:
            assert address in result.output

    def test_hash_leaves_custom_output(self, runner, members_file):
        """-o writes elsewhere."""
        result = runner.invoke(cli, ["hash-leaves", str(members_file), "-o", "out/leaves.json"])
        assert result.exit_code == 0
        assert Path("out/leaves.json").exists()

    def test_hash_leaves_bad_address(self, runner, tmp_path):
        """A bad entry fails with its index."""
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps([MEMBERS[0], "0x1234"]))
        result = runner.invoke(cli, ["hash-leaves", str(bad)])
        assert result.exit_code == 1
        assert "index 1" in result.output

    def test_root(self, runner, leaves_file):
        """Both variants print the same root."""
        result = runner.invoke(cli, ["root", str(leaves_file)] + SHAPE)
        assert result.exit_code == 0, result.output
        assert "Roots match" in result.output

    def test_root_capacity_exceeded(self, runner, leaves_file):
        """Too many leaves for the depth exit 1."""
        result = runner.invoke(cli, ["root", str(leaves_file), "--depth", "1"])
        assert result.exit_code == 1
        assert "capacity" in result.output

    def test_root_depth_from_environment(self, runner, leaves_file, monkeypatch):
        """Tree depth defaults from MEMTREE_TREE_DEPTH."""
        monkeypatch.setenv("MEMTREE_TREE_DEPTH", "2")
        result = runner.invoke(cli, ["root", str(leaves_file)])
        assert result.exit_code == 0, result.output
        assert "/4 (depth=2" in result.output


class TestProofArtifacts:
    """build-input / verify-input / tamper"""

    def test_build_input(self, runner, input_file):
        """Artifact keys and path indices for leaf 1."""
        data = json.loads(input_file.read_text())
        assert list(data) == ["root", "leaf", "pathElements", "pathIndices"]
        assert data["pathIndices"] == [1, 0, 0]

    def test_variants_agree(self, runner, leaves_file):
        """Fixed and incremental trees write identical artifacts."""
        for variant in ("fixed", "incremental"):
            result = runner.invoke(
                cli,
                ["build-input", str(leaves_file), "--variant", variant, "--index", "2", "-o", f"{variant}.json"] + SHAPE,
            )
            assert result.exit_code == 0, result.output
        assert Path("fixed.json").read_text() == Path("incremental.json").read_text()

    def test_build_input_bad_index(self, runner, leaves_file):
        """An index past the leaves exits 1."""
        result = runner.invoke(cli, ["build-input", str(leaves_file), "--index", "5"] + SHAPE)
        assert result.exit_code == 1
        assert "out of range" in result.output

    def test_verify_input(self, runner, input_file):
        """A built artifact verifies under the same shape."""
        result = runner.invoke(cli, ["verify-input", str(input_file)] + SHAPE)
        assert result.exit_code == 0, result.output
        assert "leaf index 1" in result.output

    def test_verify_input_wrong_depth(self, runner, input_file):
        """A different depth is rejected."""
        result = runner.invoke(cli, ["verify-input", str(input_file), "--depth", "4"])
        assert result.exit_code == 1

    def test_verify_input_tampered_root(self, runner, input_file):
        """A bumped root is rejected."""
        data = json.loads(input_file.read_text())
        data["root"] = str(int(data["root"]) + 1)
        input_file.write_text(json.dumps(data))
        result = runner.invoke(cli, ["verify-input", str(input_file)] + SHAPE)
        assert result.exit_code == 1

    def test_verify_input_missing(self, runner):
        """A missing file is reported."""
        result = runner.invoke(cli, ["verify-input", "nope.json"] + SHAPE)
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_tamper(self, runner, input_file):
        """One artifact per field, each rejected by verify-input."""
        result = runner.invoke(cli, ["tamper", str(input_file), "-o", "neg"] + SHAPE)
        assert result.exit_code == 0, result.output

        written = sorted(p.name for p in Path("neg").iterdir())
        assert written == sorted([
            "tampered_leaf.json",
            "tampered_pathElements_0.json",
            "tampered_pathElements_1.json",
            "tampered_pathElements_2.json",
            "tampered_root.json",
        ])
        for name in written:
            check = runner.invoke(cli, ["verify-input", f"neg/{name}"] + SHAPE)
            assert check.exit_code == 1, name


class TestGlobalOptions:
    """--env-file / --version"""

    def test_env_file(self, runner, leaves_file, tmp_path):
        """--env-file supplies tree settings."""
        env_file = tmp_path / "tree.env"
        env_file.write_text("MEMTREE_TREE_DEPTH=2\n")
        result = runner.invoke(cli, ["--env-file", str(env_file), "root", str(leaves_file)])
        assert result.exit_code == 0, result.output
        assert "(depth=2" in result.output

    def test_missing_env_file(self, runner):
        """A missing --env-file exits 1."""
        result = runner.invoke(cli, ["--env-file", "missing.env", "bench"])
        assert result.exit_code == 1

    def test_version(self, runner):
        """--version prints the package version."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestProverCommands:
    """prove / calldata with snarkjs replaced."""

    @pytest.fixture
    def circuit_dir(self, runner):
        circuit = Path("build/circuit")
        (circuit / "membership_js").mkdir(parents=True)
        (circuit / "membership_js" / "membership.wasm").write_bytes(b"")
        (circuit / "membership_final.zkey").write_bytes(b"")
        (circuit / "verification_key.json").write_text("{}")
        return circuit

    @pytest.fixture
    def snarkjs_calls(self, monkeypatch):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd[1:3])
            if cmd[1:3] == ["plonk", "fullprove"]:
                Path(cmd[7]).write_text(json.dumps(["1"]))
            return subprocess.CompletedProcess(cmd, 0, "OK!", "")

        monkeypatch.setattr(subprocess, "run", fake_run)
        return calls

    def test_prove_without_circuit(self, runner, input_file):
        """Missing circuit files are reported after local verification passes."""
        result = runner.invoke(cli, ["prove", str(input_file), "--circuit-dir", "build/none"] + SHAPE)
        assert result.exit_code == 1
        assert "not compiled" in result.output

    def test_prove_valid_artifact(self, runner, input_file, circuit_dir, snarkjs_calls):
        """A locally valid artifact is proved and verified by snarkjs."""
        result = runner.invoke(cli, ["prove", str(input_file), "--circuit-dir", str(circuit_dir)] + SHAPE)
        assert result.exit_code == 0, result.output
        assert snarkjs_calls == [["plonk", "fullprove"], ["plonk", "verify"]]

    def test_prove_rejects_tampered_root(self, runner, input_file, circuit_dir, snarkjs_calls):
        """A wrong root fails locally and never reaches snarkjs."""
        data = json.loads(input_file.read_text())
        data["root"] = str(int(data["root"]) + 1)
        input_file.write_text(json.dumps(data))

        result = runner.invoke(cli, ["prove", str(input_file), "--circuit-dir", str(circuit_dir)] + SHAPE)
        assert result.exit_code == 1
        assert "not sent to snarkjs" in result.output
        assert snarkjs_calls == []

    def test_prove_rejects_wrong_depth(self, runner, input_file, circuit_dir, snarkjs_calls):
        """A truncated path fails the shape check and never reaches snarkjs."""
        data = json.loads(input_file.read_text())
        data["pathElements"] = data["pathElements"][:1]
        data["pathIndices"] = data["pathIndices"][:1]
        input_file.write_text(json.dumps(data))

        result = runner.invoke(cli, ["prove", str(input_file), "--circuit-dir", str(circuit_dir)] + SHAPE)
        assert result.exit_code == 1
        assert snarkjs_calls == []

    def test_calldata(self, runner, monkeypatch):
        """Calldata and both tampered variants as JSON."""
        proof = ",".join(f'"{hex(i)}"' for i in range(24))
        stdout = f'[{proof}][\"0x05\"]'

        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 0, stdout, "")

        monkeypatch.setattr(subprocess, "run", fake_run)
        Path("proof.json").write_text("{}")
        Path("public.json").write_text("[]")

        result = runner.invoke(cli, ["calldata", "proof.json", "public.json", "--tampered"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["valid"]["publicSignals"] == ["0x5"]
        assert data["tamperedPublicSignals"]["publicSignals"] == ["0x6"]
        assert data["tamperedProof"]["proof"][0] == "0x1"


class TestBench:
    """bench"""

    def test_bench_small(self, runner):
        """Small shape runs every section."""
        result = runner.invoke(cli, ["bench", "--depth", "2", "--arity", "2"])
        assert result.exit_code == 0, result.output
        assert "Fixed tree build" in result.output

    def test_bench_passes_sentinel(self, runner):
        """--zero reaches the benchmark run."""
        result = runner.invoke(cli, ["--debug", "bench", "--depth", "1", "--arity", "2", "--zero", "1"])
        assert result.exit_code == 0, result.output
        assert "zero=1" in result.output

    def test_no_color(self, runner):
        """--no-color is accepted as a global option."""
        result = runner.invoke(cli, ["--no-color", "bench", "--depth", "1"])
        assert result.exit_code == 0, result.output


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
