"""
memtree CLI - build membership trees and proof artifacts

Main entry point for all CLI commands.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import click

from memtree.core.config import Settings, TreeConfig, load_settings
from memtree.core.errors import MemTreeError
from memtree.utils.logger import get_logger, setup_logging

logger = get_logger("cli")


def _fail(message: str) -> None:
    logger.error(message)
    raise click.ClickException(f"❌ {message}")


def _tree_config(settings: Settings, depth: Optional[int], arity: Optional[int], zero: Optional[int]) -> TreeConfig:
    return TreeConfig(
        depth=settings.tree_depth if depth is None else depth,
        arity=settings.tree_arity if arity is None else arity,
        zero_sentinel=settings.zero_sentinel if zero is None else zero,
    )


def tree_options(func):
    """--depth / --arity / --zero, defaulting to Settings"""
    func = click.option("--zero", type=int, default=None, help="Zero sentinel for empty leaves")(func)
    func = click.option("--arity", type=int, default=None, help="Children per node")(func)
    func = click.option("--depth", type=int, default=None, help="Tree depth")(func)
    return func


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--env-file", type=click.Path(dir_okay=False), default=None, help="Load settings from this .env file")
@click.option("--log-file", is_flag=True, help="Also write logs to logs/memtree.log")
@click.option("--no-color", is_flag=True, help="Plain console logs")
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx, debug, env_file, log_file, no_color):
    """memtree - Poseidon Merkle membership trees and proofs"""
    try:
        settings = load_settings(env_file)
    except MemTreeError as e:
        _fail(str(e))

    level = logging.DEBUG if debug else settings.log_level
    setup_logging(level=level, log_to_file=log_file, color=False if no_color else None)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


# =============================================================================
# Leaves and Roots
# =============================================================================


@cli.command("hash-leaves")
@click.argument("addresses", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", type=click.Path(dir_okay=False), default=None, help="Hashed-leaf output file")
@click.option("--show", is_flag=True, help="Print each member with its leaf")
@click.pass_context
def hash_leaves(ctx, addresses, output, show):
    """Hash an address list into field-element leaves"""
    from memtree.core.hasher import build_hash_adapter
    from memtree.core.identifiers import hash_identifiers, load_identifiers, write_hashed_leaves
    from memtree.crypto import to_checksum_address

    settings: Settings = ctx.obj["settings"]
    out = Path(output) if output else settings.hashed_leaves_path

    try:
        identifiers = load_identifiers(addresses)
        hasher = build_hash_adapter(settings.tree_arity)
        leaves = hash_identifiers(identifiers, hasher)
        write_hashed_leaves(out, leaves)
    except (MemTreeError, json.JSONDecodeError) as e:
        _fail(str(e))

    click.echo(f"✓ Hashed {len(leaves)} addresses")
    click.echo(f"  Saved to: {out}")

    if show:
        for i, (address, leaf) in enumerate(zip(identifiers, leaves)):
            click.echo(f"  [{i}] {to_checksum_address(address)} -> {leaf}")


@cli.command("root")
@click.argument("leaves", type=click.Path(exists=True, dir_okay=False))
@tree_options
@click.pass_context
def root(ctx, leaves, depth, arity, zero):
    """Print the root computed by both tree variants"""
    from memtree.core.hasher import build_hash_adapter
    from memtree.core.identifiers import read_hashed_leaves
    from memtree.core.tree import FixedDepthTree, IncrementalTree

    try:
        config = _tree_config(ctx.obj["settings"], depth, arity, zero)
        hasher = build_hash_adapter(config.arity)
        values = read_hashed_leaves(leaves)

        fixed = FixedDepthTree(values, config, hasher)
        incremental = IncrementalTree(config, hasher)
        incremental.insert_many(values)
    except MemTreeError as e:
        _fail(str(e))

    click.echo(f"Leaves: {len(values)}/{config.capacity} (depth={config.depth}, arity={config.arity})")
    click.echo(f"  Fixed root:       {fixed.root}")
    click.echo(f"  Incremental root: {incremental.root}")

    if fixed.root != incremental.root:
        _fail("Tree variants disagree on the root")
    click.echo("✓ Roots match")


# =============================================================================
# Proof Artifacts
# =============================================================================


@cli.command("build-input")
@click.argument("leaves", type=click.Path(exists=True, dir_okay=False))
@click.option("--variant", type=click.Choice(["fixed", "incremental"]), default="fixed", help="Tree variant")
@click.option("--index", type=int, default=0, help="Leaf index to prove")
@click.option("-o", "--output", type=click.Path(dir_okay=False), default=None, help="Proof artifact output file")
@tree_options
@click.pass_context
def build_input(ctx, leaves, variant, index, output, depth, arity, zero):
    """Build the circuit input proving membership of one leaf"""
    from memtree.core.hasher import build_hash_adapter
    from memtree.core.identifiers import read_hashed_leaves
    from memtree.core.proof import verify, write_proof
    from memtree.core.tree import FixedDepthTree, IncrementalTree

    settings: Settings = ctx.obj["settings"]
    out = Path(output) if output else settings.proof_input_path

    try:
        config = _tree_config(settings, depth, arity, zero)
        hasher = build_hash_adapter(config.arity)
        values = read_hashed_leaves(leaves)

        if variant == "fixed":
            proof = FixedDepthTree(values, config, hasher).path(index)
        else:
            tree = IncrementalTree(config, hasher)
            tree.insert_many(values)
            proof = tree.proof(index)
    except MemTreeError as e:
        _fail(str(e))

    if not verify(proof, config, hasher):
        _fail("Generated proof failed local verification")

    write_proof(out, proof)
    click.echo(f"✓ Proof for leaf {index} ({variant} tree)")
    click.echo(f"  Root: {proof.root}")
    click.echo(f"  Saved to: {out}")


@cli.command("verify-input")
@click.argument("input_file", metavar="INPUT", type=click.Path(dir_okay=False))
@tree_options
@click.pass_context
def verify_input(ctx, input_file, depth, arity, zero):
    """Decode a proof artifact and verify it locally"""
    from memtree.core.hasher import build_hash_adapter
    from memtree.core.proof import read_proof, verify

    try:
        config = _tree_config(ctx.obj["settings"], depth, arity, zero)
        hasher = build_hash_adapter(config.arity)
        proof = read_proof(input_file, config)
    except MemTreeError as e:
        _fail(str(e))

    if not verify(proof, config, hasher):
        _fail(f"Proof does not reproduce root {proof.root}")
    click.echo(f"✓ Proof valid for leaf index {proof.leaf_index(config.arity)}")


@cli.command("tamper")
@click.argument("input_file", metavar="INPUT", type=click.Path(dir_okay=False))
@click.option("-o", "--output-dir", type=click.Path(file_okay=False), default=None, help="Directory for tampered artifacts")
@tree_options
@click.pass_context
def tamper(ctx, input_file, output_dir, depth, arity, zero):
    """Write negative fixtures: one field perturbed per artifact"""
    from memtree.core.hasher import build_hash_adapter
    from memtree.core.proof import negative_fixtures, read_proof, verify, write_proof

    settings: Settings = ctx.obj["settings"]
    out_dir = Path(output_dir) if output_dir else settings.inputs_dir / "tampered"

    try:
        config = _tree_config(settings, depth, arity, zero)
        hasher = build_hash_adapter(config.arity)
        proof = read_proof(input_file, config)
    except MemTreeError as e:
        _fail(str(e))

    if not verify(proof, config, hasher):
        _fail("Source proof is not valid; tampered copies would prove nothing")

    written = 0
    for label, tampered in negative_fixtures(proof):
        if verify(tampered, config, hasher):
            _fail(f"Tampered {label} still verifies")
        name = label.replace("[", "_").replace("]", "")
        write_proof(out_dir / f"tampered_{name}.json", tampered)
        written += 1

    click.echo(f"✓ {written} tampered artifacts rejected locally")
    click.echo(f"  Saved to: {out_dir}")


# =============================================================================
# External Prover
# =============================================================================


@cli.command("prove")
@click.argument("input_file", metavar="INPUT", type=click.Path(dir_okay=False))
@click.option("--circuit-dir", type=click.Path(file_okay=False), default=None, help="Compiled circuit directory")
@tree_options
@click.pass_context
def prove(ctx, input_file, circuit_dir, depth, arity, zero):
    """Verify a proof artifact locally, then prove it with snarkjs"""
    from memtree.core.hasher import build_hash_adapter
    from memtree.core.proof import read_proof, verify
    from memtree.core.prover import SnarkJSProver

    settings: Settings = ctx.obj["settings"]

    try:
        config = _tree_config(settings, depth, arity, zero)
        hasher = build_hash_adapter(config.arity)
        proof = read_proof(input_file, config)
    except MemTreeError as e:
        _fail(str(e))

    if not verify(proof, config, hasher):
        _fail(f"Proof does not reproduce root {proof.root}; not sent to snarkjs")

    prover = SnarkJSProver(
        Path(circuit_dir) if circuit_dir else settings.circuit_dir,
        circuit_name=settings.circuit_name,
    )

    bundle, error = prover.generate_proof(proof)
    if bundle is None:
        _fail(f"Proof generation failed: {error}")

    valid, error = prover.verify_proof(bundle)
    if not valid:
        _fail(error)

    click.echo(f"✓ Proof generated in {bundle.proving_time_ms}ms and verified")
    click.echo(f"  Proof: {bundle.proof_path}")
    click.echo(f"  Public signals: {bundle.public_path}")


@cli.command("calldata")
@click.argument("proof_file", metavar="PROOF", type=click.Path(exists=True, dir_okay=False))
@click.argument("public_file", metavar="PUBLIC", type=click.Path(exists=True, dir_okay=False))
@click.option("--tampered", is_flag=True, help="Also print the tampered variants")
@click.pass_context
def calldata(ctx, proof_file, public_file, tampered):
    """Export Solidity calldata for the on-chain verifier"""
    from memtree.core.prover import ProofBundle, SnarkJSProver

    settings: Settings = ctx.obj["settings"]
    prover = SnarkJSProver(settings.circuit_dir, circuit_name=settings.circuit_name)
    bundle = ProofBundle(proof_path=Path(proof_file), public_path=Path(public_file))

    result, error = prover.export_calldata(bundle)
    if result is None:
        _fail(error)

    output = {"valid": result.to_dict()}
    if tampered:
        output["tamperedPublicSignals"] = result.tampered_public_signals().to_dict()
        output["tamperedProof"] = result.tampered_proof().to_dict()
    click.echo(json.dumps(output, indent=2))


# =============================================================================
# Benchmarks
# =============================================================================


@cli.command("bench")
@tree_options
@click.pass_context
def bench(ctx, depth, arity, zero):
    """Run performance benchmarks"""
    from memtree.utils.benchmark import run_all_benchmarks

    try:
        config = _tree_config(ctx.obj["settings"], depth, arity, zero)
    except MemTreeError as e:
        _fail(str(e))
    run_all_benchmarks(config)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
