from polyselect.utility_functions import make_wage_like_data
from polyselect.workflow import degree_workflow


def main():
    data = make_wage_like_data(3000, seed=1)

    result = degree_workflow(
        data,
        degree_range=range(1, 11),
        k=10,
        tolerance=0.05,
        seed=42,
        predictor="age",
        response="wage",
        n_jobs=-1,
        verbose=2,
    )
    print(result.selector.summary())
    print(result)


if __name__ == "__main__":
    main()
