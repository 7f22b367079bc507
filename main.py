import marimo

__generated_with = "0.18.3"
app = marimo.App()


@app.cell
def _():
    import object_store as obs
    from IPython.lib.pretty import pprint
    return obs, pprint


@app.cell
def _(obs):
    def setup(store):
        store.add("readme", "hello")
        store.commit("Initial commit")

    s = obs.create_memory_object_store(setup)
    return (s,)


@app.cell
def _(pprint, s):
    pprint(s)
    return


@app.cell
def _(s):
    s.branch.create("feature")
    s.branch.checkout("feature")
    s.add("notes", "draft")
    s.remove("readme")
    return


@app.cell
def _(pprint, s):
    pprint(s)
    return


@app.cell
def _(s):
    print(s.commit("Replace readme with notes").message)
    print(s.branch.list().message)
    return


@app.cell
def _(s):
    print(s.log().message)
    return


@app.cell
def _(pprint, s):
    pprint(s)
    return


if __name__ == "__main__":
    app.run()
