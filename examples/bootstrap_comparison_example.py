"""Example comparing simple and complex bootstrap standard errors.

Runs the Monte Carlo study for both scenarios and prints a summary table.
Study size comes from ``PSM_SIM_`` environment variables, so a quick run is

    PSM_SIM_NUMBER_OF_SIMULATIONS=100 PSM_SIM_N_BOOTSTRAP=100 \
        python examples/bootstrap_comparison_example.py
"""

import pandas as pd

from psm_bootstrap import MonteCarloHarness, SimulationConfig, results_to_frame
from shared.config import SimulationSettings
from shared.observability import get_logger, setup_logging, setup_metrics


def main():
    settings = SimulationSettings()
    setup_logging(settings)
    metrics = setup_metrics(settings)
    settings.log_summary(get_logger(__name__))

    config = SimulationConfig.from_settings(settings)
    print(
        f"Running study: n={config.sample_size}, "
        f"simulations={config.number_of_simulations}, R={config.n_bootstrap}"
    )

    harness = MonteCarloHarness(config, metrics=metrics)
    results = harness.run_all()

    table = results_to_frame(results)
    table["simple_ratio"] = table["simple_bootstrap_se"] / table["true_variability"]
    table["complex_ratio"] = table["complex_bootstrap_se"] / table["true_variability"]

    columns = [
        "true_variability",
        "simple_bootstrap_se",
        "complex_bootstrap_se",
        "simple_ratio",
        "complex_ratio",
        "simulation_skipped",
        "complex_skipped",
    ]
    with pd.option_context("display.float_format", "{:.4f}".format):
        print("\n📊 Bootstrap standard errors vs. true variability")
        print(table[columns].to_string())


if __name__ == "__main__":
    main()
