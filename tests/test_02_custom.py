import threading

import pytest

from pseudoidp.custom import CustomEvaluatorRegistry
from pseudoidp.exception import PseudoIdPError
from pseudoidp.exception import UnknownCustomKey
from pseudoidp.session import RequestInput


class TestCustomEvaluatorRegistry(object):
    @pytest.fixture(autouse=True)
    def create_registry(self):
        self.registry = CustomEvaluatorRegistry()

    def test_register_invoke(self):
        self.registry.register("method", lambda i, c: [i.method, c])
        assert "method" in self.registry
        assert self.registry.invoke("method", RequestInput(method="PUT"), "conf") == ["PUT", "conf"]

    def test_last_write_wins(self):
        self.registry.register("k", lambda i, c: ["first"])
        self.registry.register("k", lambda i, c: ["second"])
        assert self.registry.invoke("k", RequestInput(), None) == ["second"]
        assert self.registry.keys() == ["k"]

    def test_unknown(self):
        assert "k" not in self.registry
        with pytest.raises(UnknownCustomKey) as err:
            self.registry.invoke("k", RequestInput(), None)
        assert isinstance(err.value, PseudoIdPError)
        assert "'k'" in str(err.value)

    def test_evaluator_errors_propagate(self):
        def failing(request_input, configuration):
            raise PseudoIdPError("no luck")

        self.registry.register("fail", failing)
        with pytest.raises(PseudoIdPError):
            self.registry.invoke("fail", RequestInput(), None)

    def test_concurrent_register(self):
        def register(n):
            for i in range(50):
                self.registry.register("key{}-{}".format(n, i), lambda i, c: [])

        threads = [threading.Thread(target=register, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(self.registry.keys()) == 200
