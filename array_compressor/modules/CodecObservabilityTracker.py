class CodecObservabilityTracker :
    def __init__(self):
        self.reset()

    def reset(self):
        self.codec_ingress = 0
        self.codec_egress = 0

        self.serialize_counter = 0
        self.deserialize_counter = 0
        self.discarded_candidates = 0

        self.strategy_counts = {
            'E': 0,
            'R': 0,
            'B': 0,
            'D': 0
        }

    def get_codec_metrics(self):
        return {
            'ingress': self.codec_ingress,
            'egress': self.codec_egress,
            'serialized': self.serialize_counter,
            'deserialized': self.deserialize_counter,
            'discarded_candidates': self.discarded_candidates,
            'strategies': dict(self.strategy_counts)
        }

    def update_ingress_metrics(self, encoded: str):
        self.codec_ingress += len(encoded)

    def update_egress_metrics(self, encoded: str):
        self.codec_egress += len(encoded)

    def update_serialize_counter(self, marker: str):
        self.serialize_counter += 1
        self.strategy_counts[marker] = self.strategy_counts.get(marker, 0) + 1

    def update_deserialize_counter(self):
        self.deserialize_counter += 1

    def update_discarded_candidates(self):
        self.discarded_candidates += 1
