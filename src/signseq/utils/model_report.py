from __future__ import annotations
from typing import Iterator, List, Optional, Tuple

import torch

from ..config import DEFAULT_FEAT_DIM, DEFAULT_SEQ_LEN
from ..model.contract import ModelContract, TensorLayout
from ..model.runtime import ModelRuntime, TorchRuntime

def iter_modules(module: torch.nn.Module, prefix: str = "") -> Iterator[Tuple[str, torch.nn.Module]]:
    yield prefix.rstrip("."), module
    for name, child in module.named_children():
        yield from iter_modules(child, f"{prefix}{name}.")

def module_tree(module: torch.nn.Module, max_depth: int = 5) -> List[str]:
    lines = []
    for path, mod in iter_modules(module):
        depth = 0 if path == "" else path.count(".") + 1
        if depth > max_depth:
            continue
        lines.append(f"{'  ' * depth}{path or '<root>'} : {mod.__class__.__name__}")
    return lines

def compatibility(contract: ModelContract,
                  seq_len: int = DEFAULT_SEQ_LEN, feat_dim: int = DEFAULT_FEAT_DIM) -> str:
    if not contract.supported:
        return "unsupported input layout; windows will be packed as [N, F]"
    if (contract.seq_len, contract.feat_dim) == (seq_len, feat_dim):
        if contract.layout is TensorLayout.RANK2:
            return f"exact match: [{seq_len}, {feat_dim}]"
        return f"match with {contract.layout.name.lower()} layout {list(contract.tensor_shape())}"
    return (f"different shape: [N={contract.seq_len}, F={contract.feat_dim}], "
            f"expected [{seq_len}, {feat_dim}]")

def describe_model(runtime: Optional[ModelRuntime], contract: ModelContract,
                   labels: Optional[List[str]] = None, max_depth: int = 2) -> List[str]:
    """Plain-text inspection report, one line per entry."""
    if runtime is None:
        return ["model not loaded", f"default contract: {list(contract.tensor_shape())}"]
    out = [
        f"runtime: {type(runtime).__name__}",
        f"input shape: {list(contract.input_shape) if contract.input_shape else 'undeclared'}"
        f" (dtype {runtime.input_dtype})",
        f"output shape: {list(contract.output_shape) if contract.output_shape else 'undeclared'}",
        f"layout: {contract.layout.name}  tensor: {list(contract.tensor_shape())}",
        f"sequence length: {contract.seq_len}  feature size: {contract.feat_dim}"
        + ("" if contract.introspected else "  (defaults)"),
        f"compatibility: {compatibility(contract)}",
    ]
    if labels is not None:
        out.append(f"labels: {len(labels)}"
                   + (f" (model outputs {contract.output_size})" if contract.output_size else ""))
    for w in contract.warnings:
        out.append(f"warning: {w}")
    if isinstance(runtime, TorchRuntime) and runtime.module is not None:
        out.append("modules:")
        out.extend(module_tree(runtime.module, max_depth=max_depth))
    return out
