# Run a full fit-then-solve workflow against local mock backends.
import numpy as np

import heinzclient
from heinzclient.backend import MockBackend

NUM_NODES = 21
NUM_SIGNAL = 7  # nodes with small p-values, these should end up in the module

# Start the client log
heinzclient.start_client_log(log_to_stdout=True, log_level="DEBUG")

# A chain network, the first nodes carrying small p-values
rng = np.random.default_rng(0)
p = np.concatenate(
    [rng.uniform(0, 1e-3, NUM_SIGNAL), rng.uniform(size=NUM_NODES - NUM_SIGNAL)]
)
pvalues = {key: float(val) for key, val in enumerate(p)}
edges = [(i, i + 1) for i in range(NUM_NODES - 1)]

# What the backends would answer: BUM parameters, and Heinz node scores
# (NaN for nodes outside the module)
node_scores = "#label\tscore\n" + "".join(
    f"{key}\t{1.0 if key < NUM_SIGNAL else 'NaN'}\n" for key in pvalues
)

fitter = MockBackend.fitter(0.35, 0.19, plot_png=b"\x89PNG...")
solver = MockBackend.solver(node_scores)
with fitter, solver:
    config = heinzclient.WorkflowConfig(
        fitting=heinzclient.FittingConfig(
            host=fitter.address[0], port=fitter.address[1], plot=True
        ),
        solver=heinzclient.SolverConfig(
            host=solver.address[0], port=solver.address[1], fdr=0.01
        ),
    )
    result = heinzclient.run_workflow(pvalues, edges, config)

print(f"lambda = {result.fit.lambda_}, a = {result.fit.a}")
print(f"module: {result.module}")
print(f"plot: {len(result.plot_png)} bytes")

heinzclient.shutdown_client_log()
