# Fit a BUM model, then detect a module, on running backends.
# Start the fitter on port 9000 and Heinz on port 9001 first.
import pathlib

import heinzclient

FITTER = ("localhost", 9000)
HEINZ = ("localhost", 9001)

heinzclient.start_client_log(log_to_stdout=True, log_level="INFO")

# node key -> p-value, and edges between node keys
pvalues = {1: 0.0001, 2: 0.03, 3: 0.00002, 4: 0.4, 5: 0.9, 6: 0.0005}
edges = [(1, 2), (2, 3), (3, 4), (4, 5), (3, 6)]

with heinzclient.FittingSession(*FITTER) as fitter:
    fit = fitter.fit(list(pvalues.values()), starts=10, plot=True)
    png = fitter.get_plot_png()

pathlib.Path("bum_fit.png").write_bytes(png)
print(f"lambda = {fit.lambda_}, a = {fit.a} (plot in bum_fit.png)")

# FDR of 1% for the module
with heinzclient.SolverSession(*HEINZ) as solver:
    membership = solver.solve(pvalues, edges, fit.lambda_, fit.a, fdr=0.01)

print("in module:", sorted(key for key, member in membership.items() if member))

heinzclient.shutdown_client_log()
