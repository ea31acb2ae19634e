import time

import numpy as np
from tqdm import tqdm

from skrankone.datasets import make_rank_one_problem
from skrankone.decomposition import eig_rank_one_update

n_features = 400
n_updates = 5
rho = 1.0

V, E, t = make_rank_one_problem(n_features, random_state=0)
A = V @ np.diag(E) @ V.T

eigh_times = np.zeros(n_updates)
update_times = np.zeros(n_updates)
random_state = np.random.RandomState(0)

for i in tqdm(range(n_updates)):
    u = random_state.normal(size=n_features)
    A_next = A + rho * np.outer(u, u)

    start = time.time()
    vA, UA = np.linalg.eigh(A_next)
    eigh_times[i] = time.time() - start

    start = time.time()
    W, F, stats = eig_rank_one_update(V, E, V.T @ u, rho, solver="rational")
    update_times[i] = time.time() - start

    print("Minimum eigenvalue separation ", min(abs(np.diff(np.sort(E)))))
    print("eigenvalue error: ", np.max(np.abs(np.sort(F) - vA)))
    print("orthogonality error: ", np.max(np.abs(W.T @ W - np.eye(n_features))))
    print(
        "secular: ",
        stats.n_solved,
        "roots, ",
        stats.avg_iterations,
        "iterations per root",
    )

    A, V, E = A_next, W, F

print("eigh:   ", eigh_times)
print("update: ", update_times)
