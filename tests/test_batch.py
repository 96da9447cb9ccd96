import math

import numpy as np
import pandas as pd

from frame_engine import Node, NodalLoad, StructuralModel, analyze, analyze_batch


def test_batch_records_failures_per_row(make_cantilever, steel, rect_section):
    good = make_cantilever(L=2.0, load=NodalLoad(fz=-1e3))
    unstable = StructuralModel(
        nodes=[Node(0, 0.0, 0.0), Node(1, 2.0, 0.0)],
        elements=good.elements,
        materials=[steel],
        sections=[rect_section],
    )
    invalid = StructuralModel(nodes=[Node(0, math.nan, 0.0)])

    df = analyze_batch([good, unstable, invalid, StructuralModel()], max_workers=2)

    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ["index", "ok", "reason", "max_displacement", "max_stress"]
    assert df["index"].tolist() == [0, 1, 2, 3]
    assert df["ok"].tolist() == [True, False, False, True]
    assert df.loc[1, "reason"].startswith("unstable_structure")
    assert df.loc[2, "reason"].startswith("invalid")
    assert np.isnan(df.loc[1, "max_displacement"])


def test_batch_matches_sequential(make_cantilever):
    models = [make_cantilever(n_elements=n, L=2.0, load=NodalLoad(fz=-1e3 * n)) for n in range(1, 6)]
    df = analyze_batch(models)

    expected = [analyze(m).max_displacement for m in models]
    np.testing.assert_allclose(df["max_displacement"].to_numpy(), expected, rtol=1e-12)
    assert df["ok"].all()


def test_empty_batch():
    df = analyze_batch([])
    assert df.empty
    assert "ok" in df.columns
