import argparse
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
import scipy.sparse as sp

from ndsparse.sparse import COO, CSL, CslBuilder

# ---------- Builders ----------


def build_coo(
    dims: Tuple[int, ...], density: float, seed: int, dtype: np.dtype
) -> Tuple[COO, int]:
    rs = np.random.RandomState(seed)
    size = int(np.prod(dims))
    nnz = int(size * density)
    flat = rs.choice(size, size=nnz, replace=False)
    indices = np.stack(np.unravel_index(flat, dims), axis=1)
    data = rs.standard_normal(nnz).astype(dtype)
    return COO(dims, indices, data, check=False), nnz


def build_probe_coords(dims: Tuple[int, ...], count: int, seed: int) -> List[Tuple[int, ...]]:
    rs = np.random.RandomState(seed)
    cols = [rs.randint(0, d, size=count) for d in dims]
    return [tuple(int(c[k]) for c in cols) for k in range(count)]


def build_scipy_csr(coo: COO) -> Optional[sp.csr_matrix]:
    if coo.ndim != 2:
        return None
    return sp.csr_matrix(
        (coo.data, (coo.indices[:, 0], coo.indices[:, 1])), shape=tuple(coo.shape)
    )


# ---------- Timing helpers ----------


def time_op(fn: Callable[[], Any], warmup: int, repeat: int) -> List[float]:
    for _ in range(warmup):
        fn()
    times: List[float] = []
    for _ in range(repeat):
        t0 = time.perf_counter()
        fn()
        t1 = time.perf_counter()
        times.append(t1 - t0)
    return times


def summarize(name: str, times: List[float], ops: float) -> Optional[Dict[str, float]]:
    if not times:
        return None
    arr = np.array(times, dtype=np.float64)
    return {
        "name": name,
        "min_ms": float(arr.min() * 1e3),
        "median_ms": float(np.median(arr) * 1e3),
        "mean_ms": float(arr.mean() * 1e3),
        "mops": float((ops / arr.min()) / 1e6) if ops > 0 else 0.0,
    }


# ---------- Ops ----------


class Backend:
    SCIPY = "scipy"
    NDSPARSE = "ndsparse"


def run_lookup(store: Any, coords: List[Tuple[int, ...]]) -> int:
    hits = 0
    for c in coords:
        if store.value(c) is not None:
            hits += 1
    return hits


def run_lookup_scipy(A: sp.csr_matrix, coords: List[Tuple[int, ...]]) -> int:
    hits = 0
    for i, j in coords:
        if A[i, j] != 0:
            hits += 1
    return hits


def run_build(csl: CSL) -> CSL:
    b = CslBuilder(csl.ndim, dtype=csl.dtype)
    ndim = csl.ndim
    for _, line in csl.lines():
        while b.depth < ndim:
            b.next_outermost_dim(csl.shape[b.depth])
        b.push_line(line.data, line.indcs)
    return b.finalize()


# ---------- Main ----------


def main():
    p = argparse.ArgumentParser(description="CSL benchmarks: conversion, lookup and building")
    p.add_argument(
        "--dims", type=str, default="64,64,64", help="Comma-separated shape, outermost first"
    )
    p.add_argument("--density", type=float, default=0.01)
    p.add_argument("--dtype", type=str, default="float64", choices=["float32", "float64"])
    p.add_argument("--probes", type=int, default=10000, help="Number of random lookups")
    p.add_argument("--warmup", type=int, default=1)
    p.add_argument("--repeat", type=int, default=5)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--no_scipy", action="store_true")
    p.add_argument("--validate", action="store_true")
    p.add_argument(
        "--ops",
        type=str,
        default="all",
        help="Comma-separated ops: to_csl, to_coo, lookup, build",
    )

    args = p.parse_args()
    dtype = np.float64 if args.dtype == "float64" else np.float32
    dims = tuple(int(d) for d in args.dims.split(",") if d.strip())

    coo, nnz = build_coo(dims, args.density, args.seed, dtype)
    csl = coo.to_csl()
    A_scipy = None if args.no_scipy else build_scipy_csr(coo)
    coords = build_probe_coords(dims, args.probes, args.seed + 1)

    wanted = {op.strip().lower() for op in (args.ops.split(",") if args.ops else [])}
    if "all" in wanted or not wanted:
        wanted = {"to_csl", "to_coo", "lookup", "build"}

    results: List[Dict[str, float]] = []

    # ---- conversions ----
    if "to_csl" in wanted:
        times = time_op(lambda: coo.to_csl(), args.warmup, args.repeat)
        stats = summarize(Backend.NDSPARSE + ":to_csl", times, float(nnz))
        if stats:
            results.append(stats)
        if A_scipy is not None:
            A_coo = A_scipy.tocoo()
            times = time_op(lambda: A_coo.tocsr(), args.warmup, args.repeat)
            stats = summarize(Backend.SCIPY + ":tocsr", times, float(nnz))
            if stats:
                results.append(stats)

    if "to_coo" in wanted:
        times = time_op(lambda: csl.to_coo(), args.warmup, args.repeat)
        stats = summarize(Backend.NDSPARSE + ":to_coo", times, float(nnz))
        if stats:
            results.append(stats)
        if args.validate and csl.to_coo() != coo:
            raise AssertionError("Validation failed: CSL -> COO does not restore the entries")
        if A_scipy is not None:
            times = time_op(lambda: A_scipy.tocoo(), args.warmup, args.repeat)
            stats = summarize(Backend.SCIPY + ":tocoo", times, float(nnz))
            if stats:
                results.append(stats)

    # ---- lookup ----
    if "lookup" in wanted:
        ops = float(len(coords))
        times = time_op(lambda: run_lookup(coo, coords), args.warmup, args.repeat)
        stats = summarize(Backend.NDSPARSE + ":coo_lookup", times, ops)
        if stats:
            results.append(stats)
        times = time_op(lambda: run_lookup(csl, coords), args.warmup, args.repeat)
        stats = summarize(Backend.NDSPARSE + ":csl_lookup", times, ops)
        if stats:
            results.append(stats)
        if args.validate:
            for c in coords:
                if coo.value(c) != csl.value(c):
                    raise AssertionError(f"Validation failed: COO and CSL disagree at {c}")
        if A_scipy is not None:
            times = time_op(lambda: run_lookup_scipy(A_scipy, coords), args.warmup, args.repeat)
            stats = summarize(Backend.SCIPY + ":csr_lookup", times, ops)
            if stats:
                results.append(stats)

    # ---- builder ----
    if "build" in wanted:
        times = time_op(lambda: run_build(csl), args.warmup, args.repeat)
        stats = summarize(Backend.NDSPARSE + ":build", times, float(nnz))
        if stats:
            results.append(stats)
        if args.validate and run_build(csl) != csl:
            raise AssertionError("Validation failed: builder output differs from conversion")

    # ---- print summary ----
    print(f"CSL Benchmarks: dims={list(dims)} density={args.density} dtype={args.dtype} nnz={nnz}")
    for r in results:
        if not r:
            continue
        print(
            f"{r['name']:>22}: min {r['min_ms']:.3f} ms | median {r['median_ms']:.3f} ms | mean {r['mean_ms']:.3f} ms | {r['mops']:.2f} MOps/s"
        )


if __name__ == "__main__":
    main()
