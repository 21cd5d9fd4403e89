import glob
import logging
import os
from typing import Optional

import pandas as pd
import typer
from rich import print
from rich.logging import RichHandler

from signseq.config import PipelineConfig
from signseq.features import FALLBACK_MODES
from signseq.io import format_alternatives, save_predictions
from signseq.pipeline import SignPipeline
from signseq.results import Prediction
from signseq.utils.model_report import describe_model

app = typer.Typer(help="Sliding-window sign classification from recorded feature sequences.")

def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )

def _check_fallback(value: str) -> str:
    if value not in FALLBACK_MODES:
        raise typer.BadParameter(f"expected one of {', '.join(FALLBACK_MODES)}, got '{value}'")
    return value

def _config(model_path, labels_path, meta_path, seq_len, feat_dim, fallback, device) -> PipelineConfig:
    cfg = PipelineConfig()
    cfg.paths.model_path = model_path
    cfg.paths.labels_path = labels_path
    cfg.paths.meta_path = meta_path
    cfg.window.seq_len = seq_len
    cfg.window.feat_dim = feat_dim
    cfg.fallback.mode = fallback
    cfg.device = device
    return cfg

def _load_runtime(pipe: SignPipeline):
    try:
        return pipe.load_runtime()
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--model-path")

def _session(pipe: SignPipeline):
    return pipe.build_session(_load_runtime(pipe), load=False)

def _print_warnings(session):
    for w in session.config_warnings:
        print(f"[yellow]WARN[/yellow] {w}")

@app.command()
def live(
    npy_path: str = typer.Option(..., help="Recorded (T, F) feature sequence"),
    model_path: str = typer.Option("models/sign_language_model.pt"),
    labels_path: Optional[str] = typer.Option(None, help="labels json/txt; default table if omitted"),
    meta_path: Optional[str] = typer.Option(None, help="Shape metadata; default <model>.meta.json"),
    out_csv: Optional[str] = typer.Option(None, help="Per-frame results CSV"),
    seq_len: int = typer.Option(30, help="Window length when the model does not declare one"),
    feat_dim: int = typer.Option(1662, help="Feature size when the model does not declare one"),
    fallback: str = typer.Option("zeros", callback=_check_fallback, help="'zeros' or 'noise'"),
    device: str = typer.Option("cpu"),
    verbose: bool = typer.Option(False),
):
    """Replay a recording frame by frame through a live session."""
    _setup_logging(verbose)
    if not os.path.isfile(npy_path):
        raise typer.BadParameter(f"No such file: {npy_path}")
    pipe = SignPipeline(_config(model_path, labels_path, meta_path, seq_len, feat_dim, fallback, device))
    with _session(pipe) as session:
        _print_warnings(session)
        df = pipe.replay(session, npy_path, out_csv=out_csv)
    preds = df[df["kind"] == "Prediction"]
    last = df["status"].iloc[-1] if len(df) else "no frames"
    print(f"[bold]frames[/bold]={len(df)}  predictions={len(preds)}  last: {last}")
    if out_csv:
        print(f"[green]Saved results[/green] -> {out_csv}")

@app.command()
def video(
    npy_path: str = typer.Option(..., help="Pre-collected clip as (T, F) feature sequence"),
    model_path: str = typer.Option("models/sign_language_model.pt"),
    labels_path: Optional[str] = typer.Option(None),
    meta_path: Optional[str] = typer.Option(None),
    seq_len: int = typer.Option(30),
    feat_dim: int = typer.Option(1662),
    fallback: str = typer.Option("zeros", callback=_check_fallback),
    device: str = typer.Option("cpu"),
    verbose: bool = typer.Option(False),
):
    """Resample a whole clip to the window length and classify it once."""
    _setup_logging(verbose)
    if not os.path.isfile(npy_path):
        raise typer.BadParameter(f"No such file: {npy_path}")
    pipe = SignPipeline(_config(model_path, labels_path, meta_path, seq_len, feat_dim, fallback, device))
    with _session(pipe) as session:
        _print_warnings(session)
        result = pipe.classify_clip(session, npy_path)
    if isinstance(result, Prediction):
        print(f"[green]OK[/green] Video: {result}")
        if result.alternatives:
            print(f"  top: {format_alternatives(result)}")
    else:
        print(f"[red]FAIL[/red] Video: {result}")
        raise typer.Exit(code=1)

@app.command("video-batch")
def video_batch(
    npy_glob: str = typer.Option(..., help="Glob for clip .npy files"),
    model_path: str = typer.Option("models/sign_language_model.pt"),
    labels_path: Optional[str] = typer.Option(None),
    meta_path: Optional[str] = typer.Option(None),
    out_csv: str = typer.Option("predictions/clips.csv"),
    seq_len: int = typer.Option(30),
    feat_dim: int = typer.Option(1662),
    fallback: str = typer.Option("zeros", callback=_check_fallback),
    device: str = typer.Option("cpu"),
    verbose: bool = typer.Option(False),
):
    """Classify many clips with one session and write a summary CSV."""
    _setup_logging(verbose)
    paths = sorted(glob.glob(npy_glob))
    if not paths:
        raise typer.BadParameter(f"No NPY matched: {npy_glob}")
    pipe = SignPipeline(_config(model_path, labels_path, meta_path, seq_len, feat_dim, fallback, device))
    rows = []
    with _session(pipe) as session:
        _print_warnings(session)
        for p in paths:
            row = pipe.clip_row(session, p)
            tag = "[green]OK[/green]" if row["kind"] == "Prediction" else "[yellow]SKIP[/yellow]"
            print(f"{tag} {p}: {row['status']}")
            rows.append(row)
    save_predictions(pd.DataFrame(rows), out_csv)
    print(f"[bold]Done.[/bold] {len(rows)} clips -> {out_csv}")

@app.command()
def inspect(
    model_path: str = typer.Option("models/sign_language_model.pt"),
    labels_path: Optional[str] = typer.Option(None),
    meta_path: Optional[str] = typer.Option(None),
    seq_len: int = typer.Option(30),
    feat_dim: int = typer.Option(1662),
    max_depth: int = typer.Option(2, help="Module tree depth for torch models"),
    device: str = typer.Option("cpu"),
    verbose: bool = typer.Option(False),
):
    """Print the model inspection report."""
    _setup_logging(verbose)
    pipe = SignPipeline(_config(model_path, labels_path, meta_path, seq_len, feat_dim, "zeros", device))
    runtime = _load_runtime(pipe)
    with pipe.build_session(runtime, load=False) as session:
        report = describe_model(runtime, session.contract, labels=list(session.labels), max_depth=max_depth)
    print("[bold]MODEL INSPECTION REPORT[/bold]")
    for line in report:
        print(f"  {line}")
    if runtime is None:
        raise typer.Exit(code=1)

if __name__ == "__main__":
    app()
