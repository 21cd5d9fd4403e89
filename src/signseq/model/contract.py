from __future__ import annotations
import enum
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..config import DEFAULT_FEAT_DIM, DEFAULT_SEQ_LEN

LOGGER = logging.getLogger(__name__)

class TensorLayout(enum.Enum):
    RANK2 = 2           # [N, F]
    RANK3 = 3           # [1, N, F]
    RANK4 = 4           # [1, N, F, 1]
    UNSUPPORTED = 0     # assembled as [N, F], flagged as a configuration warning

def _dim(value, default: int) -> Tuple[int, bool]:
    """Return (dim, ok). Dynamic or nonsensical dims (None, -1, 0) fall back to default."""
    try:
        v = int(value)
    except (TypeError, ValueError):
        return default, False
    if v <= 0:
        return default, False
    return v, True

def _as_dim(d) -> Optional[int]:
    # symbolic dims ("batch", "seq") count as dynamic
    try:
        return int(d)
    except (TypeError, ValueError):
        return None

def _as_shape(shape: Optional[Sequence]) -> Optional[Tuple]:
    if shape is None:
        return None
    return tuple(_as_dim(d) for d in shape)

@dataclass(frozen=True)
class ModelContract:
    """Input/output tensor contract of a loaded model. Fixed for a session's lifetime."""
    layout: TensorLayout
    seq_len: int
    feat_dim: int
    output_size: Optional[int] = None
    input_shape: Optional[Tuple] = None
    output_shape: Optional[Tuple] = None
    introspected: bool = False
    warnings: Tuple[str, ...] = ()

    @property
    def rank(self) -> int:
        return self.layout.value

    @property
    def supported(self) -> bool:
        return self.layout is not TensorLayout.UNSUPPORTED

    def tensor_shape(self) -> Tuple[int, ...]:
        """Shape the assembler produces for this contract."""
        n, f = self.seq_len, self.feat_dim
        if self.layout is TensorLayout.RANK3:
            return (1, n, f)
        if self.layout is TensorLayout.RANK4:
            return (1, n, f, 1)
        return (n, f)

    @classmethod
    def default(cls, seq_len: int = DEFAULT_SEQ_LEN, feat_dim: int = DEFAULT_FEAT_DIM,
                output_size: Optional[int] = None) -> "ModelContract":
        # batch-first [1, N, F], the layout sequence models are usually exported with
        return cls(layout=TensorLayout.RANK3, seq_len=seq_len, feat_dim=feat_dim,
                   output_size=output_size)

    @classmethod
    def from_shapes(
        cls,
        input_shape: Optional[Sequence],
        output_shape: Optional[Sequence] = None,
        default_seq_len: int = DEFAULT_SEQ_LEN,
        default_feat_dim: int = DEFAULT_FEAT_DIM,
    ) -> "ModelContract":
        in_shape = _as_shape(input_shape)
        out_shape = _as_shape(output_shape)
        output_size = _output_size(out_shape)

        if in_shape is None:
            LOGGER.info("no input shape declared; using defaults N=%d F=%d",
                        default_seq_len, default_feat_dim)
            c = cls.default(default_seq_len, default_feat_dim, output_size)
            return cls(layout=c.layout, seq_len=c.seq_len, feat_dim=c.feat_dim,
                       output_size=output_size, output_shape=out_shape)

        warnings = []
        rank = len(in_shape)
        if rank == 2:
            layout, raw_n, raw_f = TensorLayout.RANK2, in_shape[0], in_shape[1]
        elif rank == 3:
            layout, raw_n, raw_f = TensorLayout.RANK3, in_shape[1], in_shape[2]
        elif rank == 4 and in_shape[3] in (1, None, -1):
            layout, raw_n, raw_f = TensorLayout.RANK4, in_shape[1], in_shape[2]
        else:
            layout = TensorLayout.UNSUPPORTED
            raw_n, raw_f = (in_shape[-2], in_shape[-1]) if rank >= 2 else (None, None)
            warnings.append(
                f"unsupported input shape {list(in_shape)}; assembling as [N, F]")

        n, ok_n = _dim(raw_n, default_seq_len)
        f, ok_f = _dim(raw_f, default_feat_dim)
        if not ok_n:
            warnings.append(f"sequence length not declared in {list(in_shape)}; using {n}")
        if not ok_f:
            warnings.append(f"feature size not declared in {list(in_shape)}; using {f}")

        for w in warnings:
            LOGGER.warning(w)
        LOGGER.debug("contract: shape=%s layout=%s N=%d F=%d C=%s",
                     list(in_shape), layout.name, n, f, output_size)
        return cls(
            layout=layout, seq_len=n, feat_dim=f, output_size=output_size,
            input_shape=in_shape, output_shape=out_shape,
            introspected=ok_n and ok_f, warnings=tuple(warnings),
        )

def _output_size(shape: Optional[Tuple]) -> Optional[int]:
    if not shape:
        return None
    v = shape[1] if len(shape) > 1 else shape[0]
    size, ok = _dim(v, 0)
    return size if ok else None
