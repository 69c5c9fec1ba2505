import matplotlib.pyplot as plt
import numpy as np

from .audit import theoretical_crash_survival


def plot_survival(emp, out=None):
    t = emp["t"]
    S = emp["S"]
    plt.figure(figsize=(7,5))
    plt.step(t, S, where='post', label='Empirical S(x)')
    grid_t = np.linspace(1, max(t.max(), 2.0), 300)
    plt.plot(grid_t, theoretical_crash_survival(grid_t), label='0.99 * 0.99 / x')
    plt.xscale('log')
    plt.yscale('log')
    plt.xlabel('crash point x')
    plt.ylabel('S(x)=P(X>=x)')
    plt.title('Crash Survival Function (log-log)')
    plt.legend()
    plt.tight_layout()
    if out:
        plt.savefig(out)
        plt.close()
    else:
        plt.show()
